"""Install information attached to dependency graph nodes, and .SRCINFO conversion."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from yippee.db import DepMod, arch_is_supported
from yippee.dep import AurPkg
from yippee.topo import Graph


class Reason(enum.IntEnum):
    """Why a package enters the install graph."""

    EXPLICIT = 0
    DEP = 1
    MAKE_DEP = 2
    CHECK_DEP = 3

    def __str__(self) -> str:
        return _REASON_NAMES[self]


_REASON_NAMES = {
    Reason.EXPLICIT: "Explicit",
    Reason.DEP: "Dependency",
    Reason.MAKE_DEP: "Make Dependency",
    Reason.CHECK_DEP: "Check Dependency",
}


class Source(enum.IntEnum):
    """Where a package in the install graph comes from."""

    AUR = 0
    SYNC = 1
    LOCAL = 2
    SRCINFO = 3
    MISSING = 4

    def __str__(self) -> str:
        return _SOURCE_NAMES[self]


_SOURCE_NAMES = {
    Source.AUR: "AUR",
    Source.SYNC: "Sync",
    Source.LOCAL: "Local",
    Source.SRCINFO: "SRCINFO",
    Source.MISSING: "Missing",
}

BG_COLOR_MAP = {
    Source.AUR: "lightblue",
    Source.SYNC: "lemonchiffon",
    Source.LOCAL: "darkolivegreen1",
    Source.MISSING: "tomato",
}

COLOR_MAP = {
    Reason.EXPLICIT: "black",
    Reason.DEP: "deeppink",
    Reason.MAKE_DEP: "navyblue",
    Reason.CHECK_DEP: "forestgreen",
}


@dataclass
class InstallInfo:
    """What is known about a package to be installed."""

    source: Source
    reason: Reason
    version: str = ""
    local_version: str = ""
    srcinfo_path: str | None = None
    aur_base: str | None = None
    sync_db_name: str | None = None
    is_group: bool = False
    upgrade: bool = False
    devel: bool = False

    def __str__(self) -> str:
        return f"InstallInfo{{Source: {self.source}, Reason: {self.reason}}}"


@dataclass
class ArchString:
    """A .SRCINFO value that may be restricted to one architecture ("" for all)."""

    value: str
    arch: str = ""


@dataclass
class SrcinfoPackage:
    """One package section of a .SRCINFO file."""

    pkgname: str
    pkgdesc: str = ""
    url: str = ""
    depends: list[ArchString] = field(default_factory=list)
    conflicts: list[ArchString] = field(default_factory=list)
    provides: list[ArchString] = field(default_factory=list)
    replaces: list[ArchString] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    license: list[str] = field(default_factory=list)


@dataclass
class Srcinfo:
    """A parsed .SRCINFO: the pkgbase section, its global fields and its packages."""

    pkgbase: str
    pkgver: str
    pkgrel: str
    epoch: str = ""
    pkgdesc: str = ""
    make_depends: list[ArchString] = field(default_factory=list)
    check_depends: list[ArchString] = field(default_factory=list)
    depends: list[ArchString] = field(default_factory=list)
    conflicts: list[ArchString] = field(default_factory=list)
    provides: list[ArchString] = field(default_factory=list)
    replaces: list[ArchString] = field(default_factory=list)
    packages: list[SrcinfoPackage] = field(default_factory=list)

    def version(self) -> str:
        """Full version string: [epoch:]pkgver-pkgrel."""
        base = f"{self.pkgver}-{self.pkgrel}"
        return f"{self.epoch}:{base}" if self.epoch else base


def arch_string_to_string(alpm_arches, arch_strings) -> list[str]:
    """Keep the values whose architecture is supported."""
    return [a.value for a in arch_strings if arch_is_supported(alpm_arches, a.arch)]


def make_aur_pkgs_from_srcinfo(db_executor, srcinfo: Srcinfo) -> list[AurPkg]:
    """Build one AUR package record for each package section of a .SRCINFO."""
    # A value without an architecture suffix applies to every architecture.
    arches = [*db_executor.alpm_architectures(), ""]

    def values(items) -> list[str]:
        return arch_string_to_string(arches, items)

    return [
        AurPkg(
            name=pkg.pkgname,
            package_base=srcinfo.pkgbase,
            version=srcinfo.version(),
            description=pkg.pkgdesc or srcinfo.pkgdesc,
            url=pkg.url,
            depends=values(pkg.depends) + values(srcinfo.depends),
            make_depends=values(srcinfo.make_depends),
            check_depends=values(srcinfo.check_depends),
            conflicts=values(pkg.conflicts) + values(srcinfo.conflicts),
            provides=values(pkg.provides) + values(srcinfo.provides),
            replaces=values(pkg.replaces) + values(srcinfo.replaces),
            opt_depends=[],
            groups=list(pkg.groups),
            license=list(pkg.license),
            keywords=[],
        )
        for pkg in srcinfo.packages
    ]


_MOD_MAP = {
    "=": DepMod.EQ,
    ">=": DepMod.GE,
    "<=": DepMod.LE,
    ">": DepMod.GT,
    "<": DepMod.LT,
}


def aur_dep_mod_to_alpm_dep(mod: str) -> DepMod:
    """Map a textual modifier to a DepMod; anything unknown is ANY."""
    return _MOD_MAP.get(mod, DepMod.ANY)


def new_graph() -> Graph:
    """Return an empty graph of package names to InstallInfo."""
    return Graph()