from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from modgraph.core.resolver.errors import InvalidManifest


Visibility = Literal["public", "private", "dynamic"]

VISIBILITIES: Tuple[Visibility, ...] = ("public", "private", "dynamic")


@dataclass(frozen=True)
class Manifest:
    name: str
    include_paths: Tuple[str, ...] = ()
    public_deps: Tuple[str, ...] = ()
    private_deps: Tuple[str, ...] = ()
    dynamic_deps: Tuple[str, ...] = ()
    private_include_paths: Tuple[str, ...] = ()
    base_dir: Optional[str] = None
    source: Optional[str] = None

    def deps(self, visibility: Visibility) -> Tuple[str, ...]:
        if visibility == "public":
            return self.public_deps
        if visibility == "private":
            return self.private_deps
        return self.dynamic_deps

    def all_deps(self) -> Iterable[Tuple[str, Visibility]]:
        for vis in VISIBILITIES:
            for dep in self.deps(vis):
                yield dep, vis

    def physical_location(self, include_path: str) -> str:
        """
        Normalized location an include path points at.

        Relative paths resolve against base_dir. No filesystem access.
        """
        p = include_path.replace("\\", "/")
        if self.base_dir and not posixpath.isabs(p):
            p = posixpath.join(self.base_dir.replace("\\", "/"), p)
        return posixpath.normpath(p)


def _dedupe(values: Iterable[str], *, module: str, field_name: str) -> Tuple[str, ...]:
    out: List[str] = []
    seen = set()
    for v in values or ():
        if not isinstance(v, str):
            raise InvalidManifest(module, f"{field_name} entries must be strings, got {type(v).__name__}")
        v = v.strip()
        if not v:
            raise InvalidManifest(module, f"{field_name} contains a blank entry")
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return tuple(out)


def load(
    name: str,
    include_paths: Iterable[str] = (),
    public_deps: Iterable[str] = (),
    private_deps: Iterable[str] = (),
    dynamic_deps: Iterable[str] = (),
    *,
    private_include_paths: Iterable[str] = (),
    base_dir: Optional[str] = None,
    source: Optional[str] = None,
) -> Manifest:
    """
    Build an immutable Manifest.

    Raises InvalidManifest when the name is blank or a dependency is declared
    under more than one visibility.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidManifest(str(name or ""), "module name must be a non-empty string")
    name = name.strip()

    pub = _dedupe(public_deps, module=name, field_name="public_deps")
    priv = _dedupe(private_deps, module=name, field_name="private_deps")
    dyn = _dedupe(dynamic_deps, module=name, field_name="dynamic_deps")

    seen_in: Dict[str, List[str]] = {}
    for vis, deps in (("public", pub), ("private", priv), ("dynamic", dyn)):
        for d in deps:
            seen_in.setdefault(d, []).append(vis)
    conflicts = sorted(d for d, kinds in seen_in.items() if len(kinds) > 1)
    if conflicts:
        raise InvalidManifest(
            name,
            "dependency declared with more than one visibility: " + ", ".join(conflicts),
            conflicts=conflicts,
        )

    return Manifest(
        name=name,
        include_paths=_dedupe(include_paths, module=name, field_name="include_paths"),
        public_deps=pub,
        private_deps=priv,
        dynamic_deps=dyn,
        private_include_paths=_dedupe(private_include_paths, module=name, field_name="private_include_paths"),
        base_dir=base_dir or None,
        source=source,
    )
