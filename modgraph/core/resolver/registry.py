from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Set, Tuple

from modgraph.core.resolver.errors import (
    DuplicateModule,
    RegistryFrozen,
    RegistryNotFinalized,
    UnresolvedDependency,
)
from modgraph.core.resolver.manifest import Manifest

log = logging.getLogger("modgraph.registry")


class ModuleRegistry:
    """
    All manifests known to one resolution run, keyed by module name.

    Two phases:
      loading   - register() from any number of threads, each loader wrapped
                  in `with registry.loading():`
      finalized - finalize() joined every loader; the registry is read-only
    """

    def __init__(self, externals: Optional[List[str]] = None):
        self._lock = threading.Lock()
        self._modules: Dict[str, Manifest] = {}
        self._externals: Set[str] = set()
        self._outstanding = 0
        self._finalized = False
        for name in externals or []:
            self.declare_external(name)

    # --- loading phase ---

    @contextmanager
    def loading(self) -> Iterator["ModuleRegistry"]:
        with self._lock:
            if self._finalized:
                raise RegistryFrozen("<loader>")
            self._outstanding += 1
        try:
            yield self
        finally:
            with self._lock:
                self._outstanding -= 1

    def register(self, manifest: Manifest) -> None:
        with self._lock:
            if self._finalized:
                raise RegistryFrozen(manifest.name)
            if manifest.name in self._modules:
                raise DuplicateModule(manifest.name)
            self._modules[manifest.name] = manifest
        log.debug("registry.register module=%s source=%s", manifest.name, manifest.source)

    def declare_external(self, name: str) -> None:
        name = (name or "").strip()
        if not name:
            return
        with self._lock:
            if self._finalized:
                raise RegistryFrozen(name)
            self._externals.add(name)

    # --- finalized phase ---

    @property
    def outstanding_loads(self) -> int:
        with self._lock:
            return self._outstanding

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> "ModuleRegistry":
        with self._lock:
            if self._outstanding:
                raise RegistryNotFinalized(self._outstanding)
            self._finalized = True
        return self

    @property
    def modules(self) -> Mapping[str, Manifest]:
        return MappingProxyType(self._modules)

    @property
    def externals(self) -> FrozenSet[str]:
        return frozenset(self._externals)

    def names(self) -> List[str]:
        return sorted(self._modules)

    def get(self, name: str) -> Optional[Manifest]:
        return self._modules.get(name)

    def is_external(self, name: str) -> bool:
        # a registered module always wins over an external declaration
        return name in self._externals and name not in self._modules

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def validate(self) -> None:
        """
        Check every dependency reference of every manifest in one pass.

        Raises UnresolvedDependency listing all (module, missing_ref) pairs.
        """
        missing: List[Tuple[str, str]] = []
        for name in sorted(self._modules):
            for dep, _vis in self._modules[name].all_deps():
                if dep not in self._modules and dep not in self._externals:
                    missing.append((name, dep))
        if missing:
            log.warning("registry.validate unresolved=%s", len(missing))
            raise UnresolvedDependency(missing)
