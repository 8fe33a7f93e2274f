import pytest

from modgraph.core.observability.metrics import snapshot_named
from modgraph.core.resolver.config import ResolverConfig
from modgraph.core.resolver.errors import (
    CyclicDependency,
    RegistryFrozen,
    RegistryNotFinalized,
    UnresolvedDependency,
    VisibilityConflict,
)
from modgraph.core.resolver.manifest import load
from modgraph.core.resolver.registry import ModuleRegistry
from modgraph.core.resolver.resolver import resolve


EDITOR_SET = {
    "Core": {},
    "Engine": {"public": ["Core"]},
    "Editor": {"private": ["Engine"], "dynamic": ["AssetRegistry"]},
}


def test_missing_dynamic_module_is_unresolved(make_registry):
    with pytest.raises(UnresolvedDependency) as exc:
        resolve(make_registry(EDITOR_SET))
    assert exc.value.missing == [("Editor", "AssetRegistry")]


def test_registering_dynamic_module_resolves(make_registry):
    plan = resolve(make_registry({**EDITOR_SET, "AssetRegistry": {}}))

    order = plan.order
    assert set(order) == {"Core", "Engine", "Editor", "AssetRegistry"}
    assert order.index("Core") < order.index("Engine") < order.index("Editor")


def test_external_declaration_satisfies_reference(make_registry):
    plan = resolve(make_registry(EDITOR_SET, externals=["AssetRegistry"]))
    assert "AssetRegistry" not in plan.order
    assert plan.module("Editor").dynamic_loads == ["AssetRegistry"]


def test_mutual_public_dependency_fails_with_cycle(make_registry):
    with pytest.raises(CyclicDependency) as exc:
        resolve(make_registry({"A": {"public": ["B"]}, "B": {"public": ["A"]}}))
    assert exc.value.cycle_path == ["A", "B", "A"]


def test_mutual_dynamic_dependency_resolves(make_registry):
    plan = resolve(make_registry({"A": {"dynamic": ["B"]}, "B": {"dynamic": ["A"]}}))
    assert plan.order == ["A", "B"]


def test_unresolved_is_reported_before_cycles(make_registry):
    # both problems present: the batched validation phase wins
    with pytest.raises(UnresolvedDependency):
        resolve(make_registry({"A": {"public": ["B", "Ghost"]}, "B": {"public": ["A"]}}))


def test_resolve_refuses_registry_with_outstanding_loads():
    registry = ModuleRegistry()
    with registry.loading():
        registry.register(load("Core"))
        with pytest.raises(RegistryNotFinalized):
            resolve(registry)

    assert resolve(registry).order == ["Core"]
    with pytest.raises(RegistryFrozen):
        registry.register(load("Late"))


def test_strict_mode_comes_from_config(make_registry):
    modules = {
        "A": {"public": ["B", "C"]},
        "B": {"include": ["Public"], "base_dir": "B"},
        "C": {"include": ["Public"], "base_dir": "C"},
    }
    assert resolve(make_registry(modules)).module("A").include_paths == ["B/Public", "C/Public"]

    with pytest.raises(VisibilityConflict):
        resolve(make_registry(modules), ResolverConfig(strict_visibility=True))


def test_strict_mode_from_env(make_registry, monkeypatch):
    monkeypatch.setenv("MODGRAPH_STRICT_VISIBILITY", "true")
    modules = {
        "A": {"private": ["B", "C"]},
        "B": {"include": ["Public"], "base_dir": "B"},
        "C": {"include": ["Public"], "base_dir": "C"},
    }
    with pytest.raises(VisibilityConflict):
        resolve(make_registry(modules))


def test_resolution_outcomes_are_counted(make_registry):
    resolve(make_registry({"A": {}}))
    with pytest.raises(CyclicDependency):
        resolve(make_registry({"A": {"private": ["B"]}, "B": {"private": ["A"]}}))

    snap = snapshot_named()
    assert snap["resolutions_total"] == 2
    assert snap["resolutions_ok"] == 1
    assert snap["resolutions_error"] == 1
    assert snap["errors_graph.cyclic_dependency"] == 1


def test_resolve_logs_failures(make_registry, caplog):
    caplog.set_level("INFO", logger="modgraph.resolver")
    with pytest.raises(UnresolvedDependency):
        resolve(make_registry({"A": {"public": ["Ghost"]}}))
    assert "registry.unresolved_dependency" in caplog.text
