from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Set

from modgraph.core.resolver.errors import SelfDependency
from modgraph.core.resolver.manifest import Manifest, Visibility
from modgraph.core.resolver.registry import ModuleRegistry


@dataclass(frozen=True, order=True)
class Edge:
    source: str
    target: str
    visibility: Visibility


EdgeFilter = Callable[[Edge], bool]


def static_edges(edge: Edge) -> bool:
    return edge.visibility in ("public", "private")


def public_edges(edge: Edge) -> bool:
    return edge.visibility == "public"


def dynamic_edges(edge: Edge) -> bool:
    return edge.visibility == "dynamic"


def any_edge(edge: Edge) -> bool:
    return True


class DependencyGraph:
    """
    Tagged-edge dependency graph. An edge source -> target means
    "source depends on target" with the declared visibility.

    Nodes are registered modules only; edges may point at external modules.
    """

    def __init__(self, manifests: Dict[str, Manifest], externals: FrozenSet[str]):
        self._manifests = dict(manifests)
        self.externals = externals
        self.nodes: List[str] = sorted(self._manifests)
        self._out: Dict[str, List[Edge]] = defaultdict(list)
        self._in: Dict[str, List[Edge]] = defaultdict(list)
        self._edges: Set[Edge] = set()

    def add_edge(self, edge: Edge) -> None:
        if edge in self._edges:
            return
        self._edges.add(edge)
        self._out[edge.source].append(edge)
        self._in[edge.target].append(edge)

    def seal(self) -> "DependencyGraph":
        for bucket in (self._out, self._in):
            for edges in bucket.values():
                edges.sort()
        return self

    def manifest(self, name: str) -> Manifest:
        return self._manifests[name]

    def is_node(self, name: str) -> bool:
        return name in self._manifests

    def edges(self, predicate: EdgeFilter = any_edge) -> List[Edge]:
        return sorted(e for e in self._edges if predicate(e))

    def out_edges(self, name: str, predicate: EdgeFilter = any_edge) -> List[Edge]:
        return [e for e in self._out.get(name, []) if predicate(e)]

    def in_edges(self, name: str, predicate: EdgeFilter = any_edge) -> List[Edge]:
        return [e for e in self._in.get(name, []) if predicate(e)]

    def successors(self, name: str, predicate: EdgeFilter = any_edge, *, nodes_only: bool = False) -> List[str]:
        out: List[str] = []
        for e in self.out_edges(name, predicate):
            if nodes_only and e.target not in self._manifests:
                continue
            if e.target not in out:
                out.append(e.target)
        return out

    def visibility_of(self, source: str, target: str) -> Optional[Visibility]:
        for e in self._out.get(source, []):
            if e.target == target:
                return e.visibility
        return None

    def __len__(self) -> int:
        return len(self.nodes)


def build(registry: ModuleRegistry) -> DependencyGraph:
    """
    Convert a validated registry into a DependencyGraph.

    Raises SelfDependency naming every module that lists itself.
    """
    manifests = dict(registry.modules)

    offenders = sorted(
        name for name, m in manifests.items()
        if any(dep == name for dep, _vis in m.all_deps())
    )
    if offenders:
        raise SelfDependency(offenders)

    externals = frozenset(e for e in registry.externals if registry.is_external(e))
    graph = DependencyGraph(manifests, externals)
    for name in sorted(manifests):
        for dep, vis in manifests[name].all_deps():
            graph.add_edge(Edge(source=name, target=dep, visibility=vis))
    return graph.seal()
