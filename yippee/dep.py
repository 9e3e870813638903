"""Dependency string parsing and satisfaction checks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from yippee.db import vercmp

_MOD_CHARS = "<>="


@dataclass
class AurPkg:
    """A package record as returned by the AUR."""

    name: str
    package_base: str = ""
    version: str = ""
    description: str = ""
    url: str = ""
    id: int = 0
    package_base_id: int = 0
    depends: list[str] = field(default_factory=list)
    make_depends: list[str] = field(default_factory=list)
    check_depends: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    provides: list[str] = field(default_factory=list)
    replaces: list[str] = field(default_factory=list)
    opt_depends: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    license: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


def split_dep(dep: str) -> tuple[str, str, str]:
    """Split "name>=ver" into (name, modifier, version)."""
    fields = [f for f in re.split(r"[<>=]+", dep) if f]
    mod = "".join(c for c in dep if c in _MOD_CHARS)
    if not fields:
        return "", "", ""
    if len(fields) == 1:
        return fields[0], "", ""
    return fields[0], mod, fields[1]


def ver_satisfies(ver1: str, mod: str, ver2: str) -> bool:
    if mod == "=":
        return vercmp(ver1, ver2) == 0
    if mod == "<":
        return vercmp(ver1, ver2) < 0
    if mod == "<=":
        return vercmp(ver1, ver2) <= 0
    if mod == ">":
        return vercmp(ver1, ver2) > 0
    if mod == ">=":
        return vercmp(ver1, ver2) >= 0
    return True


def pkg_satisfies(name: str, version: str, dep: str) -> bool:
    dep_name, dep_mod, dep_version = split_dep(dep)
    if dep_name != name:
        return False
    return ver_satisfies(version, dep_mod, dep_version)


def provide_satisfies(provide: str, dep: str, pkg_version: str) -> bool:
    dep_name, dep_mod, dep_version = split_dep(dep)
    provide_name, provide_mod, provide_version = split_dep(provide)
    if provide_name != dep_name:
        return False
    if provide_mod == "" and dep_mod != "":
        provide_version = pkg_version
    return ver_satisfies(provide_version, dep_mod, dep_version)


def satisfies_aur(dep: str, pkg: AurPkg) -> bool:
    if pkg_satisfies(pkg.name, pkg.version, dep):
        return True
    return any(provide_satisfies(p, dep, pkg.version) for p in pkg.provides)


def _split_db_from_name(pkg: str) -> tuple[str, str]:
    db_name, sep, name = pkg.partition("/")
    if sep:
        return db_name, name
    return "", pkg


@dataclass(frozen=True)
class Target:
    """A requested package, optionally qualified by database and version."""

    db: str
    name: str
    mod: str
    version: str

    def dep_string(self) -> str:
        return self.name + self.mod + self.version

    def __str__(self) -> str:
        if self.db:
            return f"{self.db}/{self.dep_string()}"
        return self.dep_string()


def to_target(pkg: str) -> Target:
    db_name, dep_string = _split_db_from_name(pkg)
    name, mod, version = split_dep(dep_string)
    return Target(db=db_name, name=name, mod=mod, version=version)