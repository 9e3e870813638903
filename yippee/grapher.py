"""Build install graphs from targets, AUR records and .SRCINFO files."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from yippee.db import Depend, Package, SyncUpgrade, vercmp
from yippee.dep import (
    AurPkg,
    provide_satisfies,
    satisfies_aur,
    split_dep,
    to_target,
)
from yippee.install_info import (
    BG_COLOR_MAP,
    COLOR_MAP,
    InstallInfo,
    Reason,
    Source,
    Srcinfo,
    aur_dep_mod_to_alpm_dep,
    make_aur_pkgs_from_srcinfo,
    new_graph,
)
from yippee.topo import Graph, NodeInfo, TopoError


class QueryBy(enum.Enum):
    """Field an AUR query matches against."""

    NAME = "name"
    NAME_DESC = "name-desc"
    MAINTAINER = "maintainer"
    DEPENDS = "depends"
    MAKE_DEPENDS = "makedepends"
    OPT_DEPENDS = "optdepends"
    CHECK_DEPENDS = "checkdepends"
    PROVIDES = "provides"
    CONFLICTS = "conflicts"
    REPLACES = "replaces"
    GROUPS = "groups"
    KEYWORDS = "keywords"


@dataclass
class AurQuery:
    """A lookup against the AUR."""

    needles: list[str]
    by: QueryBy = QueryBy.NAME
    contains: bool = False


class AurClient(Protocol):
    """Anything that can answer AUR queries."""

    def get(self, query: AurQuery) -> list[AurPkg]: ...


@dataclass
class _IntRanges:
    ranges: list[tuple[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ranges)

    def get(self, n: int) -> bool:
        return any(lo <= n <= hi for lo, hi in self.ranges)


def _parse_number_menu(text: str) -> tuple[_IntRanges, _IntRanges, set[str], set[str]]:
    """Parse input such as "1 2 3", "1-3" or "^4" into selections."""
    include, exclude = _IntRanges(), _IntRanges()
    other_include: set[str] = set()
    other_exclude: set[str] = set()
    for token in text.replace(",", " ").split():
        excluded = token.startswith("^")
        if excluded:
            token = token[1:]
        if not token:
            continue
        ranges = exclude if excluded else include
        others = other_exclude if excluded else other_include
        lo_text, sep, hi_text = token.partition("-")
        try:
            lo = int(lo_text)
            hi = int(hi_text) if sep else lo
        except ValueError:
            others.add(token)
            continue
        ranges.ranges.append((min(lo, hi), max(lo, hi)))
    return include, exclude, other_include, other_exclude


class Grapher:
    """Resolves packages and their dependencies into a dependency graph."""

    def __init__(
        self,
        db_executor,
        aur_client: AurClient,
        full_graph: bool = False,
        no_confirm: bool = False,
        no_deps: bool = False,
        no_check_deps: bool = False,
        needed: bool = False,
        logger: logging.Logger | None = None,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        self.db_executor = db_executor
        self.aur_client = aur_client
        self.full_graph = full_graph
        self.no_confirm = no_confirm
        self.no_deps = no_deps
        self.no_check_deps = no_check_deps
        self.needed = needed
        self.logger = logger or logging.getLogger("yippee.grapher")
        self.prompt = prompt or input
        self.provider_cache: dict[str, list[AurPkg]] = {}

    def _query(self, query: AurQuery, failure: str) -> list[AurPkg]:
        try:
            return list(self.aur_client.get(query))
        except Exception as exc:  # the AUR being unreachable is not fatal
            self.logger.error("%s%s", failure, exc)
            return []

    def _depend_on(self, graph: Graph, child, parent, label: str) -> None:
        try:
            graph.depend_on(child, parent)
        except TopoError as exc:
            self.logger.warning("%s %s %s %s", label, child, parent, exc)

    def graph_from_targets(self, graph: Graph | None, targets) -> Graph:
        """Add every target, resolved from the repositories or the AUR."""
        if graph is None:
            graph = new_graph()
        aur_targets: list[str] = []
        for target_string in targets:
            target = to_target(target_string)
            if target.db in ("", "aur"):
                if target.db == "":
                    pkg = self.db_executor.sync_satisfier(target.name)
                    if pkg is not None:
                        self.graph_sync_pkg(graph, pkg, None)
                        continue
                    group = self.db_executor.packages_from_group(target.name)
                    if group:
                        self.graph_sync_group(graph, target.name, group[0].db_name)
                        continue
                aur_targets.append(target.name)
                continue
            pkg = self.db_executor.satisfier_from_db(target.name, target.db)
            if pkg is not None:
                self.graph_sync_pkg(graph, pkg, None)
                continue
            if self.db_executor.packages_from_group_and_db(target.name, target.db):
                self.graph_sync_group(graph, target.name, target.db)
                continue
            self.logger.error("No package found for %s", target)
        return self.graph_from_aur(graph, aur_targets)

    def _pick_srcinfo_pkgs(self, pkgs: list[AurPkg]) -> list[AurPkg]:
        for number, pkg in enumerate(pkgs, start=1):
            self.logger.info("%d %s %s", number, pkg.name, pkg.version)
            self.logger.info("    %s", pkg.description)
        self.logger.info('Packages to exclude (eg: "1 2 3", "1-3", "^4"):')
        answer = "" if self.no_confirm else self.prompt("")
        include, exclude, _, other_exclude = _parse_number_menu(answer)
        is_include = len(exclude) == 0 and not other_exclude
        final = []
        for number, pkg in enumerate(pkgs, start=1):
            if is_include and not include.get(number):
                final.append(pkg)
            if not is_include and exclude.get(number):
                final.append(pkg)
        return final

    def _add_aur_pkg_provides(self, pkg: AurPkg, graph: Graph) -> None:
        for provide in pkg.provides:
            dep_name, mod, version = split_dep(provide)
            self.logger.debug("%s provides: %s", pkg, dep_name)
            graph.provides(
                dep_name,
                Depend(name=dep_name, version=version, mod=aur_dep_mod_to_alpm_dep(mod)),
                pkg.name,
            )

    def _reason_of_installed(self, name: str) -> Reason | None:
        local = self.db_executor.local_package(name)
        return None if local is None else Reason(int(local.reason))

    def graph_from_srcinfos(self, graph: Graph | None, srcinfos: dict[str, Srcinfo]) -> Graph:
        """Add the packages built from local .SRCINFO files, keyed by directory."""
        if graph is None:
            graph = new_graph()
        added: list[AurPkg] = []
        for pkgbuild_dir, srcinfo in srcinfos.items():
            aur_pkgs = make_aur_pkgs_from_srcinfo(self.db_executor, srcinfo)
            if len(aur_pkgs) > 1:
                aur_pkgs = self._pick_srcinfo_pkgs(aur_pkgs)
            for pkg in aur_pkgs:
                reason = self._reason_of_installed(pkg.name)
                if reason is None:
                    reason = Reason.EXPLICIT
                graph.add_node(pkg.name)
                self._add_aur_pkg_provides(pkg, graph)
                self.validate_and_set_node_info(
                    graph,
                    pkg.name,
                    NodeInfo(
                        color=COLOR_MAP[reason],
                        background=BG_COLOR_MAP[Source.AUR],
                        value=InstallInfo(
                            source=Source.SRCINFO,
                            reason=reason,
                            srcinfo_path=pkgbuild_dir,
                            aur_base=pkg.package_base,
                            version=pkg.version,
                        ),
                    ),
                )
            added.extend(aur_pkgs)
        self.add_deps_for_pkgs(added, graph)
        return graph

    def add_deps_for_pkgs(self, pkgs, graph: Graph) -> None:
        for pkg in pkgs:
            self._add_dep_nodes(pkg, graph)

    def _add_dep_nodes(self, pkg: AurPkg, graph: Graph) -> None:
        if pkg.make_depends:
            self._add_nodes(graph, pkg.name, pkg.make_depends, Reason.MAKE_DEP)
        if not self.no_deps and pkg.depends:
            self._add_nodes(graph, pkg.name, pkg.depends, Reason.DEP)
        if not self.no_check_deps and not self.no_deps and pkg.check_depends:
            self._add_nodes(graph, pkg.name, pkg.check_depends, Reason.CHECK_DEP)

    def graph_sync_pkg(
        self, graph: Graph | None, pkg: Package, upgrade_info: SyncUpgrade | None
    ) -> Graph:
        """Add a repository package as a target."""
        if graph is None:
            graph = new_graph()
        graph.add_node(pkg.name)
        for provide in pkg.provides:
            self.logger.debug("%s provides: %s", pkg.name, provide)
            graph.provides(provide.name, provide, pkg.name)
        info = InstallInfo(
            source=Source.SYNC,
            reason=Reason.EXPLICIT,
            version=pkg.version,
            sync_db_name=pkg.db_name,
        )
        if upgrade_info is None:
            reason = self._reason_of_installed(pkg.name)
            if reason is not None:
                info.reason = reason
        else:
            info.upgrade = True
            info.reason = Reason(int(upgrade_info.reason))
            info.local_version = upgrade_info.local_version
        self.validate_and_set_node_info(
            graph,
            pkg.name,
            NodeInfo(color=COLOR_MAP[info.reason], background=BG_COLOR_MAP[info.source], value=info),
        )
        return graph

    def graph_sync_group(self, graph: Graph | None, group_name: str, db_name: str) -> Graph:
        """Add a repository group as a single target node."""
        if graph is None:
            graph = new_graph()
        graph.add_node(group_name)
        self.validate_and_set_node_info(
            graph,
            group_name,
            NodeInfo(
                color=COLOR_MAP[Reason.EXPLICIT],
                background=BG_COLOR_MAP[Source.SYNC],
                value=InstallInfo(
                    source=Source.SYNC,
                    reason=Reason.EXPLICIT,
                    version="",
                    sync_db_name=db_name,
                    is_group=True,
                ),
            ),
        )
        return graph

    def graph_aur_target(self, graph: Graph | None, pkg: AurPkg, install_info: InstallInfo) -> Graph:
        """Add an AUR package node with the given install information."""
        if graph is None:
            graph = new_graph()
        graph.add_node(pkg.name)
        self._add_aur_pkg_provides(pkg, graph)
        self.validate_and_set_node_info(
            graph,
            pkg.name,
            NodeInfo(
                color=COLOR_MAP[install_info.reason],
                background=BG_COLOR_MAP[Source.AUR],
                value=install_info,
            ),
        )
        return graph

    def graph_from_aur(self, graph: Graph | None, targets) -> Graph:
        """Add AUR targets, choosing among providers where needed, with their deps."""
        if graph is None:
            graph = new_graph()
        targets = list(targets)
        if not targets:
            return graph

        for pkg in self._query(AurQuery(needles=targets, by=QueryBy.NAME), ""):
            self.provider_cache.setdefault(pkg.name, [pkg])

        added: list[AurPkg] = []
        for target in targets:
            aur_pkgs = self.provider_cache.get(target)
            if aur_pkgs is None:
                aur_pkgs = self._query(
                    AurQuery(needles=[target], by=QueryBy.PROVIDES, contains=True),
                    f"Failed to find AUR package for {target}: ",
                )
            if not aur_pkgs:
                self.logger.error("No AUR package found for %s", target)
                continue
            aur_pkg = aur_pkgs[0]
            if len(aur_pkgs) > 1:
                aur_pkg = self._provide_menu(target, aur_pkgs)
                self.provider_cache[target] = [aur_pkg]

            reason = Reason.EXPLICIT
            local = self.db_executor.local_package(aur_pkg.name)
            if local is not None:
                reason = Reason(int(local.reason))
                if self.needed and vercmp(local.version, aur_pkg.version) >= 0:
                    self.logger.warning("%s-%s is up to date -- skipping", local.name, local.version)
                    continue

            graph = self.graph_aur_target(
                graph,
                aur_pkg,
                InstallInfo(
                    source=Source.AUR,
                    reason=reason,
                    version=aur_pkg.version,
                    aur_base=aur_pkg.package_base,
                ),
            )
            added.append(aur_pkg)

        self.add_deps_for_pkgs(added, graph)
        return graph

    def _find_deps_from_aur(self, deps: dict[str, None]) -> list[AurPkg]:
        """Resolve deps from the AUR, removing every one that is found."""
        if not deps:
            return []
        missing = [split_dep(d)[0] for d in deps if d not in self.provider_cache]
        if missing:
            self.logger.debug("deps to find %s", missing)
            for pkg in self._query(AurQuery(needles=missing, by=QueryBy.NAME), ""):
                if pkg.name in deps:
                    self.provider_cache.setdefault(pkg.name, []).append(pkg)
                for provide in pkg.provides:
                    if provide != pkg.name and provide in deps:
                        self.provider_cache.setdefault(provide, []).append(pkg)

        found: list[AurPkg] = []
        for dep_string in list(deps):
            dep_name = split_dep(dep_string)[0]
            candidates = self.provider_cache.get(dep_string)
            if candidates is None:
                candidates = self._query(
                    AurQuery(needles=[dep_name], by=QueryBy.PROVIDES, contains=True),
                    f"Failed to find AUR package for {dep_string}: ",
                )
            candidates = [p for p in candidates if satisfies_aur(dep_string, p)]
            if not candidates:
                self.logger.error("No AUR package found for %s", dep_string)
                continue
            pkg = candidates[0]
            if len(candidates) > 1:
                pkg = self._provide_menu(dep_string, candidates)
            self.provider_cache[dep_string] = [pkg]
            del deps[dep_string]
            found.append(pkg)
        return found

    def validate_and_set_node_info(self, graph: Graph, node, node_info: NodeInfo) -> None:
        """Set node info unless it would downgrade the reason or replace an upgrade."""
        current = graph.get_node_info(node)
        if current is not None and current.value is not None:
            if node_info.value is not None and current.value.reason < node_info.value.reason:
                return
            if current.value.upgrade:
                return
        graph.set_node_info(node, node_info)

    def _add_nodes(self, graph: Graph, parent: str, deps, dep_type: Reason) -> None:
        to_find: dict[str, None] = dict.fromkeys(deps)

        # Already in the graph, directly or through a provide.
        for dep_string in list(to_find):
            dep_name = split_dep(dep_string)[0]
            if not graph.exists(dep_name) and not graph.provides_exists(dep_name):
                continue
            if graph.exists(dep_name):
                self._depend_on(graph, dep_name, parent, "")
                to_find.pop(dep_string, None)
            provider = graph.get_provider_node(dep_name)
            if provider is not None and provide_satisfies(str(provider), dep_string, provider.version):
                self._depend_on(graph, provider.provider, parent, "")
                to_find.pop(dep_string, None)

        # Installed.
        for dep_string in list(to_find):
            dep_name = split_dep(dep_string)[0]
            if not self.db_executor.local_satisfier_exists(dep_string):
                continue
            if self.full_graph:
                self.validate_and_set_node_info(
                    graph,
                    dep_name,
                    NodeInfo(color=COLOR_MAP[dep_type], background=BG_COLOR_MAP[Source.LOCAL]),
                )
                self._depend_on(graph, dep_name, parent, "")
            del to_find[dep_string]

        # Repositories.
        for dep_string in list(to_find):
            alpm_pkg = self.db_executor.sync_satisfier(dep_string)
            if alpm_pkg is None:
                continue
            self._depend_on(graph, alpm_pkg.name, parent, "repo dep warn:")
            self.validate_and_set_node_info(
                graph,
                alpm_pkg.name,
                NodeInfo(
                    color=COLOR_MAP[dep_type],
                    background=BG_COLOR_MAP[Source.SYNC],
                    value=InstallInfo(
                        source=Source.SYNC,
                        reason=dep_type,
                        version=alpm_pkg.version,
                        sync_db_name=alpm_pkg.db_name,
                    ),
                ),
            )
            if alpm_pkg.depends and self.full_graph:
                self._add_nodes(graph, alpm_pkg.name, [d.name for d in alpm_pkg.depends], Reason.DEP)
            del to_find[dep_string]

        # AUR.
        for aur_pkg in self._find_deps_from_aur(to_find):
            self._depend_on(graph, aur_pkg.name, parent, "aur dep warn:")
            graph.set_node_info(
                aur_pkg.name,
                NodeInfo(
                    color=COLOR_MAP[dep_type],
                    background=BG_COLOR_MAP[Source.AUR],
                    value=InstallInfo(
                        source=Source.AUR,
                        reason=dep_type,
                        aur_base=aur_pkg.package_base,
                        version=aur_pkg.version,
                    ),
                ),
            )
            self._add_dep_nodes(aur_pkg, graph)

        # Whatever is left could not be found anywhere.
        for dep_string in to_find:
            dep_name, mod, version = split_dep(dep_string)
            self._depend_on(graph, dep_name, parent, "missing dep warn:")
            graph.set_node_info(
                dep_name,
                NodeInfo(
                    color=COLOR_MAP[dep_type],
                    background=BG_COLOR_MAP[Source.MISSING],
                    value=InstallInfo(source=Source.MISSING, reason=dep_type, version=f"{mod}{version}"),
                ),
            )

    def _provide_menu(self, dep: str, options: list[AurPkg]) -> AurPkg:
        if len(options) == 1:
            return options[0]
        choices = " ".join(f"{n}) {pkg.name}" for n, pkg in enumerate(options, start=1))
        self.logger.info(
            "There are %d providers available for %s:\nRepository AUR\n    %s",
            len(options), dep, choices,
        )
        while True:
            self.logger.info("\nEnter a number (default=1): ")
            if self.no_confirm:
                self.logger.info("1")
                return options[0]
            try:
                answer = self.prompt("")
            except (EOFError, OSError) as exc:
                self.logger.error("%s", exc)
                return options[0]
            if answer == "":
                return options[0]
            try:
                num = int(answer)
            except ValueError:
                self.logger.error("invalid number: %s", answer)
                continue
            if num < 1 or num > len(options):
                self.logger.error("invalid value: %d is not between %d and %d", num, 1, len(options))
                continue
            return options[num - 1]