import pytest

from yippee.db import DepMod, Depend, arch_is_supported, vercmp

VERSIONS = ["6.0.100-1", "10.8.4-1", "10.8.8-1", "17.2.6-2", "1.9.2-1",
            "1.9.2.r159.gb3ac716c-1", "1:0.1-1", "11.0.12.u7-1", "0.8.1"]


@pytest.mark.parametrize("v", VERSIONS)
def test_vercmp_equal(v):
    assert vercmp(v, v) == 0


@pytest.mark.parametrize("a", VERSIONS)
@pytest.mark.parametrize("b", VERSIONS)
def test_vercmp_antisymmetric(a, b):
    assert (vercmp(a, b) > 0) == (vercmp(b, a) < 0)


def test_vercmp_numeric_not_lexical():
    assert vercmp("6.0.100-1", "10.8.4-1") < 0


def test_vercmp_epoch_wins():
    assert vercmp("1:0.1-1", "17.2.6-2") > 0


def test_vercmp_release_ignored_when_missing():
    assert vercmp("17.2.6", "17.2.6-2") == 0


def test_arch_any():
    assert arch_is_supported([], "any") is True


def test_arch_listed_and_unlisted():
    assert arch_is_supported(["x86_64"], "x86_64") is True
    assert arch_is_supported(["x86_64"], "8086") is False


def test_depend_str():
    dep = Depend(name="ceph-libs", version="17.2.6-2", mod=DepMod.EQ)
    assert str(dep) == "ceph-libs=17.2.6-2"
    assert str(Depend(name="zlib")) == "zlib"