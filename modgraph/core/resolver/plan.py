from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from modgraph.core.resolver.graph import DependencyGraph, static_edges
from modgraph.core.resolver.manifest import Visibility
from modgraph.core.resolver.visibility import ModuleVisibility


PLAN_VERSION = "v1"


@dataclass(frozen=True)
class LinkEntry:
    name: str
    visibility: Visibility
    reexport: bool
    external: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "visibility": self.visibility,
            "reexport": self.reexport,
            "external": self.external,
        }


@dataclass(frozen=True)
class PlannedModule:
    name: str
    include_paths: List[str] = field(default_factory=list)
    links: List[LinkEntry] = field(default_factory=list)
    transitive_links: List[str] = field(default_factory=list)
    dynamic_loads: List[str] = field(default_factory=list)

    @property
    def public_links(self) -> List[str]:
        return [l.name for l in self.links if l.reexport]

    @property
    def private_links(self) -> List[str]:
        return [l.name for l in self.links if not l.reexport]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "include_paths": list(self.include_paths),
            "links": [l.to_dict() for l in self.links],
            "transitive_links": list(self.transitive_links),
            "dynamic_loads": list(self.dynamic_loads),
        }


@dataclass(frozen=True)
class BuildPlan:
    plan_version: str
    modules: List[PlannedModule] = field(default_factory=list)
    externals: List[str] = field(default_factory=list)
    strict: bool = False

    @property
    def order(self) -> List[str]:
        return [m.name for m in self.modules]

    def module(self, name: str) -> PlannedModule:
        for m in self.modules:
            if m.name == name:
                return m
        raise KeyError(name)

    def runtime_loads(self) -> Dict[str, List[str]]:
        """Dynamic dependencies per module, for the runtime loader."""
        return {m.name: list(m.dynamic_loads) for m in self.modules if m.dynamic_loads}

    def _payload(self) -> Dict[str, Any]:
        return {
            "plan_version": self.plan_version,
            "strict": self.strict,
            "order": self.order,
            "modules": [m.to_dict() for m in self.modules],
            "externals": list(self.externals),
            "runtime_loads": self.runtime_loads(),
        }

    def compute_plan_id(self) -> str:
        return hashlib.sha256(json.dumps(self._payload(), sort_keys=True).encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        payload = self._payload()
        payload["plan_id"] = self.compute_plan_id()
        return payload

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent)


def emit(
    graph: DependencyGraph,
    order: Sequence[str],
    visibility: Mapping[str, ModuleVisibility],
    *,
    strict: bool = False,
) -> BuildPlan:
    modules: List[PlannedModule] = []
    for name in order:
        vis = visibility[name]
        links = [
            LinkEntry(
                name=e.target,
                visibility=e.visibility,
                reexport=e.visibility == "public",
                external=not graph.is_node(e.target),
            )
            for e in graph.out_edges(name, static_edges)
        ]
        modules.append(PlannedModule(
            name=name,
            include_paths=list(vis.include_paths),
            links=sorted(links, key=lambda l: l.name),
            transitive_links=sorted(vis.visible),
            dynamic_loads=sorted(vis.dynamic_loads),
        ))

    return BuildPlan(
        plan_version=PLAN_VERSION,
        modules=modules,
        externals=sorted(graph.externals),
        strict=strict,
    )
