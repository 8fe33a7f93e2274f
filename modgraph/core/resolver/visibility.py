from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Sequence, Set, Tuple

from modgraph.core.resolver.errors import VisibilityConflict
from modgraph.core.resolver.graph import DependencyGraph, dynamic_edges, public_edges, static_edges

log = logging.getLogger("modgraph.visibility")


@dataclass(frozen=True)
class ModuleVisibility:
    name: str
    # physical locations: own public, own private, then inherited public in plan order of origin
    include_paths: Tuple[str, ...] = ()
    # modules (and externals) whose public interface this module re-exposes
    exported: FrozenSet[str] = field(default_factory=frozenset)
    # modules (and externals) whose public interface this module compiles against
    visible: FrozenSet[str] = field(default_factory=frozenset)
    dynamic_loads: Tuple[str, ...] = ()


def propagate(
    graph: DependencyGraph,
    order: Sequence[str],
    *,
    strict: bool = False,
) -> Dict[str, ModuleVisibility]:
    """
    Walk modules in build order and compute effective include paths.

    A public dependency's exported interface flows on to this module's own
    dependents; a private one stops here. Dynamic dependencies contribute
    nothing at build time and are only listed as runtime loads.

    Include paths come out as physical locations, deduplicated keeping the
    first occurrence. strict=True raises VisibilityConflict when two inherited
    public origins export the same declared path from different physical
    locations; a module's own paths never conflict with what it inherits.
    """
    position = {name: idx for idx, name in enumerate(order)}
    exported: Dict[str, FrozenSet[str]] = {}
    out: Dict[str, ModuleVisibility] = {}

    for name in order:
        manifest = graph.manifest(name)

        exp: Set[str] = {name}
        for dep in graph.successors(name, public_edges):
            exp |= exported[dep] if graph.is_node(dep) else {dep}
        exported[name] = frozenset(exp)

        visible: Set[str] = set()
        for dep in graph.successors(name, static_edges):
            visible |= exported[dep] if graph.is_node(dep) else {dep}

        own: List[str] = [
            manifest.physical_location(p)
            for p in manifest.include_paths + manifest.private_include_paths
        ]
        inherited: List[Tuple[str, str, str]] = []
        for origin in sorted((v for v in visible if graph.is_node(v)), key=position.__getitem__):
            origin_manifest = graph.manifest(origin)
            for p in origin_manifest.include_paths:
                inherited.append((origin, p, origin_manifest.physical_location(p)))

        _check_inherited(name, inherited, strict=strict)

        out[name] = ModuleVisibility(
            name=name,
            include_paths=_dedupe_paths(own + [physical for _o, _p, physical in inherited]),
            exported=exported[name],
            visible=frozenset(visible),
            dynamic_loads=tuple(graph.successors(name, dynamic_edges)),
        )

    return out


def _check_inherited(module: str, inherited: List[Tuple[str, str, str]], *, strict: bool) -> None:
    """Two public origins exporting one declared path from different places is ambiguous."""
    first_seen: Dict[str, Tuple[str, str]] = {}
    for origin, declared, physical in inherited:
        prior = first_seen.setdefault(declared, (origin, physical))
        if prior[0] == origin or prior[1] == physical:
            continue
        if strict:
            raise VisibilityConflict(module, prior[1], physical)
        log.debug(
            "visibility.ambiguous module=%s path=%s first=%s other=%s",
            module, declared, prior[1], physical,
        )


def _dedupe_paths(paths: List[str]) -> Tuple[str, ...]:
    out: List[str] = []
    seen = set()
    for p in paths:
        if p in seen:
            continue
        seen.add(p)
        out.append(p)
    return tuple(out)
