"""
Manifest file loader.

Reads module manifests from YAML or JSON documents and registers them into a
ModuleRegistry. A document is either one module:

    name: Engine
    base_dir: Runtime/Engine
    include_paths: [Public]
    private_include_paths: [Private]
    public_dependencies: [Core]
    private_dependencies: [Json]
    dynamic_dependencies: [AssetRegistry]

or a bundle:

    externals: [ThirdPartyZlib]
    modules:
      - name: Core
      - name: Engine
        public_dependencies: [Core]

Directory loads fan out over a thread pool, one loader per file, and join
before returning so the registry can be finalized.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from modgraph.core.resolver.config import ResolverConfig
from modgraph.core.resolver.errors import ManifestLoadError, ResolutionError
from modgraph.core.resolver.manifest import Manifest, load
from modgraph.core.resolver.registry import ModuleRegistry

_log = logging.getLogger("modgraph.loader")

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")

# accepted spellings per field; first one is canonical
_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "include_paths": ("include_paths", "public_include_paths"),
    "private_include_paths": ("private_include_paths",),
    "public_deps": ("public_dependencies", "public_deps", "public"),
    "private_deps": ("private_dependencies", "private_deps", "private"),
    "dynamic_deps": ("dynamic_dependencies", "dynamic_deps", "dynamically_loaded", "dynamic"),
}


def _pick_list(raw: Dict[str, Any], field: str, source: str) -> List[Any]:
    for key in _FIELD_ALIASES[field]:
        if key in raw:
            value = raw[key]
            if value is None:
                return []
            if isinstance(value, str):
                return [value]
            if not isinstance(value, list):
                raise ManifestLoadError(source, f"'{key}' must be a list, got {type(value).__name__}")
            return value
    return []


def manifest_from_dict(raw: Any, *, source: str = "<memory>") -> Manifest:
    if not isinstance(raw, dict):
        raise ManifestLoadError(source, f"module entry must be a mapping, got {type(raw).__name__}")

    base_dir = raw.get("base_dir")
    if base_dir is not None and not isinstance(base_dir, str):
        raise ManifestLoadError(source, "'base_dir' must be a string")

    return load(
        raw.get("name") or "",
        _pick_list(raw, "include_paths", source),
        _pick_list(raw, "public_deps", source),
        _pick_list(raw, "private_deps", source),
        _pick_list(raw, "dynamic_deps", source),
        private_include_paths=_pick_list(raw, "private_include_paths", source),
        base_dir=base_dir,
        source=source,
    )


def parse_document(data: Any, *, source: str = "<memory>") -> Tuple[List[Manifest], List[str]]:
    """Returns (manifests, externals) for one parsed document."""
    if isinstance(data, dict) and "modules" in data:
        entries = data.get("modules") or []
        externals = data.get("externals") or []
        if not isinstance(entries, list):
            raise ManifestLoadError(source, "'modules' must be a list")
        if not isinstance(externals, list) or not all(isinstance(x, str) for x in externals):
            raise ManifestLoadError(source, "'externals' must be a list of module names")
        return [manifest_from_dict(e, source=source) for e in entries], list(externals)

    if isinstance(data, dict):
        return [manifest_from_dict(data, source=source)], []

    raise ManifestLoadError(source, f"document must be a mapping, got {type(data).__name__}")


def read_manifest_file(path: Path) -> Tuple[List[Manifest], List[str]]:
    path = Path(path)
    source = str(path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestLoadError(source, f"unreadable: {exc}") from exc

    try:
        if path.suffix == ".json":
            data = json.loads(raw_text)
        else:
            data = yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestLoadError(source, f"malformed document: {exc}") from exc

    return parse_document(data, source=source)


def load_into(registry: ModuleRegistry, path: Path) -> int:
    """Register every manifest of one file. Returns the number registered."""
    with registry.loading():
        manifests, externals = read_manifest_file(path)
        for name in externals:
            registry.declare_external(name)
        for m in manifests:
            registry.register(m)
    _log.debug("loader.file path=%s modules=%s externals=%s", path, len(manifests), len(externals))
    return len(manifests)


def discover_manifest_files(root: Path) -> List[Path]:
    root = Path(root)
    return sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.suffix in MANIFEST_SUFFIXES and not p.name.startswith(("_", "."))
    )


def load_manifest_dir(
    root: Path,
    registry: Optional[ModuleRegistry] = None,
    *,
    max_workers: Optional[int] = None,
) -> ModuleRegistry:
    """
    Load every manifest file under `root` in parallel.

    All loaders are joined before returning. If any file fails, the failure
    of the first file in path order is raised; the rest are logged.
    """
    registry = registry if registry is not None else ModuleRegistry()
    if max_workers is None:
        max_workers = ResolverConfig.from_env().max_workers
    files = discover_manifest_files(root)
    if not files:
        _log.warning("No manifest files found under %s", root)
        return registry

    failures: List[Tuple[Path, ResolutionError]] = []
    with ThreadPoolExecutor(max_workers=max(1, int(max_workers))) as pool:
        futures = [(path, pool.submit(load_into, registry, path)) for path in files]
        total = 0
        for path, fut in futures:
            try:
                total += fut.result()
            except ResolutionError as exc:
                failures.append((path, exc))

    if failures:
        for path, exc in failures[1:]:
            _log.warning("loader.failed path=%s code=%s: %s", path, exc.code, exc.message)
        raise failures[0][1]

    _log.info("Loaded %d module manifests from %d files under %s", total, len(files), root)
    return registry
