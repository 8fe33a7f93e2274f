from __future__ import annotations

import heapq
from typing import Dict, Iterator, List, Optional, Tuple

from modgraph.core.resolver.errors import CyclicDependency
from modgraph.core.resolver.graph import DependencyGraph, static_edges

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def find_cycle(graph: DependencyGraph) -> Optional[List[str]]:
    """
    Three-color DFS over static edges between registered modules.

    Roots and successors are visited in lexicographic order, so the reported
    cycle is stable. Returns the cycle as [m0, m1, ..., m0] or None.
    """
    color: Dict[str, int] = {n: _UNVISITED for n in graph.nodes}

    for root in graph.nodes:
        if color[root] != _UNVISITED:
            continue

        color[root] = _IN_PROGRESS
        path: List[str] = [root]
        stack: List[Tuple[str, Iterator[str]]] = [
            (root, iter(graph.successors(root, static_edges, nodes_only=True)))
        ]

        while stack:
            node, children = stack[-1]
            child = next(children, None)

            if child is None:
                color[node] = _DONE
                stack.pop()
                path.pop()
                continue

            state = color[child]
            if state == _IN_PROGRESS:
                start = path.index(child)
                return path[start:] + [child]
            if state == _UNVISITED:
                color[child] = _IN_PROGRESS
                path.append(child)
                stack.append((child, iter(graph.successors(child, static_edges, nodes_only=True))))

    return None


def topological_order(graph: DependencyGraph) -> List[str]:
    """
    Build order over static edges: every module comes after all of its
    public and private dependencies. Among ready modules the lexicographically
    smallest goes first. Dynamic edges are ignored.

    Raises CyclicDependency with the full cycle path.
    """
    cycle = find_cycle(graph)
    if cycle is not None:
        raise CyclicDependency(cycle)

    pending: Dict[str, int] = {
        n: len(graph.successors(n, static_edges, nodes_only=True)) for n in graph.nodes
    }
    ready = [n for n, count in pending.items() if count == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        current = heapq.heappop(ready)
        order.append(current)

        dependents = {e.source for e in graph.in_edges(current, static_edges)}
        for dependent in dependents:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) != len(graph.nodes):
        # find_cycle() already cleared the graph; this only trips on a broken graph
        raise CyclicDependency(sorted(set(graph.nodes) - set(order)))

    return order
