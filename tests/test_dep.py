import pytest

from yippee.dep import (
    AurPkg,
    pkg_satisfies,
    provide_satisfies,
    satisfies_aur,
    split_dep,
    to_target,
    ver_satisfies,
)


def test_split_dep_versioned():
    assert split_dep("ceph-libs=17.2.6-2") == ("ceph-libs", "=", "17.2.6-2")
    assert split_dep("dotnet-sdk>=6") == ("dotnet-sdk", ">=", "6")


def test_split_dep_plain_and_empty():
    assert split_dep("dep1") == ("dep1", "", "")
    assert split_dep("") == ("", "", "")


@pytest.mark.parametrize("target", ["extra/libzip", "aur/gourou", "dotnet-sdk<7", "libzip"])
def test_target_round_trip(target):
    assert str(to_target(target)) == target


def test_to_target_fields():
    t = to_target("extra/libzip")
    assert (t.db, t.name, t.dep_string()) == ("extra", "libzip", "libzip")


def test_ver_satisfies_no_mod():
    assert ver_satisfies("1", "", "2") is True
    assert ver_satisfies("6.0.100-1", ">=", "6") is True
    assert ver_satisfies("6.0.100-1", "<", "6") is False


def test_pkg_satisfies_name_mismatch():
    assert not pkg_satisfies("ceph", "17.2.6-2", "ceph-libs=17.2.6-2")
    assert pkg_satisfies("ceph-libs", "17.2.6-2", "ceph-libs=17.2.6-2")


def test_unversioned_provide_uses_pkg_version():
    assert provide_satisfies("ceph", "ceph=17.2.6-2", "17.2.6-2")
    assert not provide_satisfies("ceph", "ceph=17.2.6-2", "0.8.1")


def test_satisfies_aur_via_provides():
    pkg = AurPkg(name="libzip-git", package_base="libzip-git",
                 version="1.9.2.r159.gb3ac716c-1",
                 provides=["libzip=1.9.2.r159.gb3ac716c"])
    assert satisfies_aur("libzip", pkg)
    assert satisfies_aur("libzip-git", pkg)
    assert not satisfies_aur("gourou", pkg)