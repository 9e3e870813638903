"""Dependency graph with layered topological sorting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, TypeVar

from yippee.db import Depend

T = TypeVar("T", bound=Hashable)
V = TypeVar("V")


class TopoError(Exception):
    """Base class for graph errors."""


class SelfReferentialError(TopoError):
    def __init__(self) -> None:
        super().__init__("self-referential dependencies not allowed")


class ConflictingAliasError(TopoError):
    def __init__(self) -> None:
        super().__init__("alias already defined")


class CircularDependencyError(TopoError):
    def __init__(self) -> None:
        super().__init__("circular dependencies not allowed")


@dataclass
class NodeInfo(Generic[V]):
    """Display attributes and payload attached to a node."""

    color: str = ""
    background: str = ""
    value: Any = None


@dataclass
class DependencyInfo(Generic[T]):
    """A provide entry together with the node providing it."""

    provider: Any
    depend: Depend

    @property
    def name(self) -> str:
        return self.depend.name

    @property
    def version(self) -> str:
        return self.depend.version

    def __str__(self) -> str:
        return str(self.depend)


def _add_edge(depmap: dict, key, node) -> None:
    depmap.setdefault(key, {})[node] = None


def _remove_edge(depmap: dict, key, node) -> bool:
    """Remove node from depmap[key]; return True if the entry was dropped."""
    nodes = depmap.get(key)
    if nodes is not None and len(nodes) == 1:
        del depmap[key]
        return True
    if nodes is not None:
        nodes.pop(node, None)
    return False


class Graph(Generic[T, V]):
    """A directed dependency graph.

    ``depend_on(child, parent)`` records that ``parent`` needs ``child``.
    """

    def __init__(self) -> None:
        self._nodes: dict = {}
        self._node_info: dict = {}
        self._provides: dict = {}
        self._dependencies: dict = {}  # child -> parents
        self._dependents: dict = {}  # parent -> children

    def __len__(self) -> int:
        return len(self._nodes)

    def exists(self, node) -> bool:
        return node in self._nodes

    def add_node(self, node) -> None:
        self._nodes[node] = None

    def provides_exists(self, provides) -> bool:
        return provides in self._provides

    def get_provider_node(self, provides) -> DependencyInfo | None:
        return self._provides.get(provides)

    def provides(self, provides, depend: Depend, node) -> None:
        self._provides[provides] = DependencyInfo(provider=node, depend=depend)

    def for_each(self, fn: Callable) -> None:
        for node in list(self._nodes):
            info = self._node_info.get(node)
            fn(node, info.value if info is not None else None)

    def set_node_info(self, node, node_info: NodeInfo) -> None:
        self._node_info[node] = node_info

    def get_node_info(self, node) -> NodeInfo | None:
        return self._node_info.get(node)

    def depend_on(self, child, parent) -> None:
        if child == parent:
            raise SelfReferentialError()
        if self.depends_on(parent, child):
            raise CircularDependencyError()
        self.add_node(parent)
        self.add_node(child)
        _add_edge(self._dependents, parent, child)
        _add_edge(self._dependencies, child, parent)

    def __str__(self) -> str:
        lines = [
            "digraph {",
            "compound=true;",
            "concentrate=true;",
            "node [shape = record, ordering=out];",
        ]
        for node in self._nodes:
            extra = ""
            info = self._node_info.get(node)
            if info is not None and (info.background or info.color):
                extra = f"[color = {info.color}, style = filled, fillcolor = {info.background}]"
            lines.append(f'\t"{node}"{extra};')
        for parent, children in self._dependencies.items():
            for child in children:
                lines.append(f'\t"{parent}" -> "{child}";')
        return "\n".join(lines) + "\n}"

    def depends_on(self, child, parent) -> bool:
        return parent in self.dependencies(child)

    def has_dependent(self, parent, child) -> bool:
        return child in self.dependents(parent)

    def _leaves_map(self) -> dict:
        leaves = {}
        for node in self._nodes:
            if node not in self._dependencies:
                info = self._node_info.get(node)
                leaves[node] = info.value if info is not None else None
        return leaves

    def topo_sorted_layer_map(self, check_fn: Callable | None = None) -> list[dict]:
        """Return layers of nodes in topological order, mapped to their values."""
        layers = []
        shrinking = self._clone()
        while True:
            leaves = shrinking._leaves_map()
            if not leaves:
                break
            layers.append(leaves)
            for node, value in leaves.items():
                if check_fn is not None:
                    check_fn(node, value)
                shrinking._remove(node)
        return layers

    def prune(self, node) -> list:
        """Remove node, its dependents and dependencies left without others."""
        pruned = [node]
        for dependent in list(self._dependents.get(node, {})):
            if _remove_edge(self._dependencies, dependent, node):
                pruned.extend(self.prune(dependent))
        self._dependents.pop(node, None)
        for dependency in list(self._dependencies.get(node, {})):
            if _remove_edge(self._dependents, dependency, node):
                pruned.extend(self.prune(dependency))
        self._dependencies.pop(node, None)
        self._nodes.pop(node, None)
        return pruned

    def _remove(self, node) -> None:
        for dependent in list(self._dependents.get(node, {})):
            _remove_edge(self._dependencies, dependent, node)
        self._dependents.pop(node, None)
        for dependency in list(self._dependencies.get(node, {})):
            _remove_edge(self._dependents, dependency, node)
        self._dependencies.pop(node, None)
        self._nodes.pop(node, None)

    def dependencies(self, child) -> set:
        return self._build_transitive(child, self.immediate_dependencies)

    def immediate_dependencies(self, node) -> set:
        return set(self._dependencies.get(node, ()))

    def dependents(self, parent) -> set:
        return self._build_transitive(parent, self._immediate_dependents)

    def _immediate_dependents(self, node) -> set:
        return set(self._dependents.get(node, ()))

    def _clone(self) -> Graph:
        other: Graph = Graph()
        other._nodes = dict(self._nodes)
        other._dependencies = {k: dict(v) for k, v in self._dependencies.items()}
        other._dependents = {k: dict(v) for k, v in self._dependents.items()}
        other._node_info = self._node_info
        return other

    def _build_transitive(self, root, next_fn: Callable) -> set:
        if root not in self._nodes:
            return set()
        out: set = set()
        search = [root]
        while search:
            discovered = []
            for node in search:
                for nxt in next_fn(node):
                    if nxt not in out:
                        out.add(nxt)
                        discovered.append(nxt)
            search = discovered
        return out