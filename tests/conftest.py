from typing import Dict, Iterable, List

import pytest
from fastapi.testclient import TestClient

from modgraph.api.main import app
from modgraph.core.observability.metrics import reset_metrics
from modgraph.core.resolver.manifest import load
from modgraph.core.resolver.registry import ModuleRegistry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Resolver config comes from env; keep tests independent of the shell
    monkeypatch.delenv("MODGRAPH_STRICT_VISIBILITY", raising=False)
    monkeypatch.delenv("MODGRAPH_LOADER_WORKERS", raising=False)
    reset_metrics()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def make_registry():
    """
    Factory: make_registry({"A": {"public": ["B"]}, "B": {}}, externals=["X"])

    Keys per module: include, private_include, public, private, dynamic, base_dir.
    """

    def _make(modules: Dict[str, Dict[str, List[str]]], *, externals: Iterable[str] = ()) -> ModuleRegistry:
        registry = ModuleRegistry(externals=list(externals))
        with registry.loading():
            for name, spec in modules.items():
                registry.register(load(
                    name,
                    spec.get("include", []),
                    spec.get("public", []),
                    spec.get("private", []),
                    spec.get("dynamic", []),
                    private_include_paths=spec.get("private_include", []),
                    base_dir=spec.get("base_dir"),
                ))
        return registry

    return _make
