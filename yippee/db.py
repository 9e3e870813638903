"""Package database types, version comparison and the executor interface."""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters)
_ALNUM = _DIGITS | _ALPHA


class PkgReason(enum.IntEnum):
    """Why a package was installed."""

    EXPLICIT = 0
    DEPEND = 1


class DepMod(enum.IntEnum):
    """Version constraint modifier of a dependency."""

    ANY = 1
    EQ = 2
    GE = 3
    LE = 4
    GT = 5
    LT = 6

    @property
    def symbol(self) -> str:
        return _DEP_MOD_SYMBOLS[self]


_DEP_MOD_SYMBOLS = {
    DepMod.ANY: "",
    DepMod.EQ: "=",
    DepMod.GE: ">=",
    DepMod.LE: "<=",
    DepMod.GT: ">",
    DepMod.LT: "<",
}


@dataclass
class Depend:
    """A dependency, provide or conflict entry."""

    name: str
    version: str = ""
    mod: DepMod = DepMod.ANY
    description: str = ""

    def __str__(self) -> str:
        return f"{self.name}{self.mod.symbol}{self.version}"


@dataclass
class Package:
    """An installed or repository package."""

    name: str
    version: str = ""
    base: str = ""
    db_name: str = ""
    reason: PkgReason = PkgReason.EXPLICIT
    description: str = ""
    provides: list[Depend] = field(default_factory=list)
    depends: list[Depend] = field(default_factory=list)
    optional_depends: list[Depend] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    build_date: datetime | None = None
    size: int = 0


@dataclass
class Upgrade:
    """An available upgrade for display."""

    name: str
    base: str = ""
    repository: str = ""
    local_version: str = ""
    remote_version: str = ""
    reason: PkgReason = PkgReason.EXPLICIT
    extra: str = ""


@dataclass
class SyncUpgrade:
    """A repository upgrade for an installed package."""

    package: Package
    local_version: str = ""
    reason: PkgReason = PkgReason.EXPLICIT


class Executor(Protocol):
    """Access to the local and sync package databases."""

    def alpm_architectures(self) -> list[str]: ...
    def biggest_packages(self) -> list[Package]: ...
    def cleanup(self) -> None: ...
    def installed_remote_package_names(self) -> list[str]: ...
    def installed_remote_packages(self) -> dict[str, Package]: ...
    def installed_sync_package_names(self) -> list[str]: ...
    def is_correct_version_installed(self, name: str, version: str) -> bool: ...
    def last_build_time(self) -> datetime | None: ...
    def local_package(self, name: str) -> Package | None: ...
    def local_packages(self) -> list[Package]: ...
    def local_satisfier_exists(self, dep: str) -> bool: ...
    def package_depends(self, pkg: Package) -> list[Depend]: ...
    def package_groups(self, pkg: Package) -> list[str]: ...
    def package_optional_depends(self, pkg: Package) -> list[Depend]: ...
    def package_provides(self, pkg: Package) -> list[Depend]: ...
    def packages_from_group(self, group: str) -> list[Package]: ...
    def packages_from_group_and_db(self, group: str, db_name: str) -> list[Package]: ...
    def refresh_handle(self) -> None: ...
    def sync_upgrades(self, enable_downgrade: bool) -> dict[str, SyncUpgrade]: ...
    def repos(self) -> list[str]: ...
    def satisfier_from_db(self, dep: str, db_name: str) -> Package | None: ...
    def sync_package(self, name: str) -> Package | None: ...
    def sync_package_from_db(self, name: str, db_name: str) -> Package | None: ...
    def sync_packages(self, *names: str) -> list[Package]: ...
    def sync_satisfier(self, dep: str) -> Package | None: ...
    def sync_satisfier_exists(self, dep: str) -> bool: ...
    def set_logger(self, logger: Any) -> None: ...


def _rpmvercmp(a: str, b: str) -> int:
    if a == b:
        return 0
    n1, n2 = len(a), len(b)
    i = j = p1 = p2 = 0
    while i < n1 and j < n2:
        while i < n1 and a[i] not in _ALNUM:
            i += 1
        while j < n2 and b[j] not in _ALNUM:
            j += 1
        if i >= n1 or j >= n2:
            break
        if i - p1 != j - p2:
            return -1 if i - p1 < j - p2 else 1
        p1, p2 = i, j
        charset = _DIGITS if a[p1] in _DIGITS else _ALPHA
        isnum = charset is _DIGITS
        while p1 < n1 and a[p1] in charset:
            p1 += 1
        while p2 < n2 and b[p2] in charset:
            p2 += 1
        seg1, seg2 = a[i:p1], b[j:p2]
        if not seg1:
            return -1
        if not seg2:
            return 1 if isnum else -1
        if isnum:
            seg1 = seg1.lstrip("0")
            seg2 = seg2.lstrip("0")
            if len(seg1) != len(seg2):
                return 1 if len(seg1) > len(seg2) else -1
        if seg1 != seg2:
            return 1 if seg1 > seg2 else -1
        i, j = p1, p2
    if i >= n1 and j >= n2:
        return 0
    if (i >= n1 and b[j] not in _ALPHA) or (i < n1 and a[i] in _ALPHA):
        return -1
    return 1


def _parse_evr(evr: str) -> tuple[str, str, str | None]:
    k = 0
    while k < len(evr) and evr[k] in _DIGITS:
        k += 1
    if k < len(evr) and evr[k] == ":":
        epoch = evr[:k] or "0"
        rest = evr[k + 1 :]
    else:
        epoch, rest = "0", evr
    dash = rest.rfind("-")
    if dash >= 0:
        return epoch, rest[:dash], rest[dash + 1 :]
    return epoch, rest, None


def vercmp(v1: str, v2: str) -> int:
    """Compare two versions the pacman way; negative if v1 is older."""
    if v1 == v2:
        return 0
    e1, ver1, rel1 = _parse_evr(v1)
    e2, ver2, rel2 = _parse_evr(v2)
    ret = _rpmvercmp(e1, e2)
    if ret == 0:
        ret = _rpmvercmp(ver1, ver2)
        if ret == 0 and rel1 is not None and rel2 is not None:
            ret = _rpmvercmp(rel1, rel2)
    return ret


def arch_is_supported(alpm_arch, arch: str) -> bool:
    """Return whether arch is "any" or one of the configured architectures."""
    return arch == "any" or arch in alpm_arch