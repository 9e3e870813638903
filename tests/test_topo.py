import pytest

from yippee.db import DepMod, Depend
from yippee.topo import (
    CircularDependencyError,
    Graph,
    NodeInfo,
    SelfReferentialError,
    TopoError,
)


def _jellyfin_graph():
    g = Graph()
    g.add_node("jellyfin")
    g.depend_on("jellyfin-web", "jellyfin")
    g.depend_on("jellyfin-server", "jellyfin")
    g.depend_on("dotnet-runtime-6.0", "jellyfin-server")
    g.depend_on("dotnet-sdk-6.0", "jellyfin")
    g.depend_on("dotnet-sdk-6.0", "jellyfin-server")
    return g


def test_self_reference():
    g = Graph()
    with pytest.raises(SelfReferentialError, match="self-referential"):
        g.depend_on("a", "a")


def test_circular():
    g = Graph()
    g.depend_on("a", "b")
    with pytest.raises(CircularDependencyError):
        g.depend_on("b", "a")
    assert issubclass(CircularDependencyError, TopoError)


def test_layers_are_topological():
    g = _jellyfin_graph()
    layers = g.topo_sorted_layer_map()
    position = {n: i for i, layer in enumerate(layers) for n in layer}
    assert set(position) == set(g._nodes)
    for child in position:
        for parent in g.immediate_dependencies(child):
            assert position[parent] < position[child]
    assert list(layers[0]) == ["jellyfin"]


def test_layers_carry_values_and_keep_graph():
    g = _jellyfin_graph()
    g.set_node_info("jellyfin", NodeInfo(value="root"))
    layers = g.topo_sorted_layer_map(None)
    assert layers[0] == {"jellyfin": "root"}
    assert len(g) == 5


def test_check_fn_sees_every_node():
    g = _jellyfin_graph()
    seen = []
    g.topo_sorted_layer_map(lambda n, v: seen.append(n))
    assert sorted(seen) == sorted(g._nodes)


def test_transitive_relations():
    g = _jellyfin_graph()
    assert g.depends_on("dotnet-runtime-6.0", "jellyfin")
    assert g.has_dependent("jellyfin", "dotnet-runtime-6.0")
    assert not g.depends_on("jellyfin", "dotnet-runtime-6.0")
    assert g.dependencies("missing") == set()


def test_provides():
    g = Graph()
    g.provides("libzip", Depend("libzip", "1.9.2.r159.gb3ac716c", DepMod.EQ), "libzip-git")
    assert g.provides_exists("libzip")
    info = g.get_provider_node("libzip")
    assert info.provider == "libzip-git"
    assert str(info) == "libzip=1.9.2.r159.gb3ac716c"
    assert g.get_provider_node("nope") is None


def test_str_lists_edges():
    g = Graph()
    g.depend_on("b", "a")
    g.set_node_info("a", NodeInfo(color="black", background="lightblue"))
    out = str(g)
    assert out.startswith("digraph {")
    assert '\t"b" -> "a";' in out
    assert "fillcolor = lightblue" in out