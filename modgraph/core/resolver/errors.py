from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple


class ResolutionError(Exception):
    """
    Base for every failure a resolution run can surface.

    Each subclass has a stable `code` and a `data` dict so the HTTP layer
    (and any other caller) can shape the failure without parsing messages.
    """

    code = "resolution.failed"

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.data: Dict[str, Any] = dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class InvalidManifest(ResolutionError):
    code = "manifest.invalid"

    def __init__(self, module: str, reason: str, *, conflicts: Sequence[str] = ()):
        self.module = module
        self.reason = reason
        self.conflicts = list(conflicts)
        super().__init__(
            f"Invalid manifest '{module}': {reason}",
            data={"module": module, "reason": reason, "conflicts": self.conflicts},
        )


class ManifestLoadError(ResolutionError):
    code = "manifest.load_failed"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(
            f"Cannot load manifest from {source}: {reason}",
            data={"source": source, "reason": reason},
        )


class DuplicateModule(ResolutionError):
    code = "registry.duplicate_module"

    def __init__(self, module: str):
        self.module = module
        super().__init__(f"Duplicate module: {module}", data={"module": module})


class UnresolvedDependency(ResolutionError):
    code = "registry.unresolved_dependency"

    def __init__(self, missing: Iterable[Tuple[str, str]]):
        self.missing: List[Tuple[str, str]] = sorted(set(missing))
        listing = ", ".join(f"{m} -> {ref}" for m, ref in self.missing)
        super().__init__(
            f"Unresolved dependencies ({len(self.missing)}): {listing}",
            data={"missing": [{"module": m, "ref": ref} for m, ref in self.missing]},
        )


class SelfDependency(ResolutionError):
    code = "graph.self_dependency"

    def __init__(self, modules: Iterable[str]):
        self.modules = sorted(set(modules))
        super().__init__(
            f"Modules depend on themselves: {', '.join(self.modules)}",
            data={"modules": self.modules},
        )


class CyclicDependency(ResolutionError):
    code = "graph.cyclic_dependency"

    def __init__(self, cycle_path: Sequence[str]):
        self.cycle_path = list(cycle_path)
        super().__init__(
            f"Circular dependency detected: {' -> '.join(self.cycle_path)}",
            data={"cycle": self.cycle_path},
        )


class VisibilityConflict(ResolutionError):
    code = "visibility.conflict"

    def __init__(self, module: str, path_a: str, path_b: str):
        self.module = module
        self.path_a = path_a
        self.path_b = path_b
        super().__init__(
            f"Ambiguous include path for '{module}': {path_a} vs {path_b}",
            data={"module": module, "path_a": path_a, "path_b": path_b},
        )


class RegistryNotFinalized(ResolutionError):
    code = "registry.not_finalized"

    def __init__(self, outstanding: int):
        self.outstanding = outstanding
        super().__init__(
            f"Registry has {outstanding} manifest load(s) outstanding",
            data={"outstanding": outstanding},
        )


class RegistryFrozen(ResolutionError):
    code = "registry.frozen"

    def __init__(self, module: str):
        self.module = module
        super().__init__(
            f"Registry is finalized; cannot register '{module}'",
            data={"module": module},
        )
