import json

from modgraph.core.resolver.plan import LinkEntry
from modgraph.core.resolver.resolver import resolve


ENGINE_MODULES = {
    "Core": {"include": ["Core/Public"]},
    "Engine": {"include": ["Engine/Public"], "public": ["Core"]},
    "Editor": {"include": ["Editor/Public"], "private": ["Engine"], "dynamic": ["AssetRegistry"]},
    "AssetRegistry": {"include": ["AssetRegistry/Public"], "public": ["Core"]},
}


def test_links_flag_public_dependencies_for_reexport(make_registry):
    plan = resolve(make_registry({
        "Core": {},
        "Json": {},
        "Engine": {"public": ["Core"], "private": ["Json", "zlib"]},
    }, externals=["zlib"]))

    engine = plan.module("Engine")
    assert engine.links == [
        LinkEntry("Core", "public", reexport=True),
        LinkEntry("Json", "private", reexport=False),
        LinkEntry("zlib", "private", reexport=False, external=True),
    ]
    assert engine.public_links == ["Core"]
    assert engine.private_links == ["Json", "zlib"]
    assert plan.externals == ["zlib"]


def test_plan_scenario_with_dynamic_module(make_registry):
    plan = resolve(make_registry(ENGINE_MODULES))

    order = plan.order
    assert order.index("Core") < order.index("Engine") < order.index("Editor")

    editor = plan.module("Editor")
    assert editor.include_paths == ["Editor/Public", "Core/Public", "Engine/Public"]
    assert [l.name for l in editor.links] == ["Engine"]
    assert editor.transitive_links == ["Core", "Engine"]
    assert editor.dynamic_loads == ["AssetRegistry"]
    assert plan.runtime_loads() == {"Editor": ["AssetRegistry"]}


def test_plan_serializes_with_stable_id(make_registry):
    a = resolve(make_registry(ENGINE_MODULES))
    b = resolve(make_registry(dict(reversed(list(ENGINE_MODULES.items())))))

    assert a.compute_plan_id() == b.compute_plan_id()
    assert a.to_dict() == b.to_dict()

    body = json.loads(a.to_json())
    assert body["plan_id"] == a.compute_plan_id()
    assert body["order"] == a.order
    assert body["modules"][0]["name"] == a.order[0]
    assert set(body["modules"][0]) == {"name", "include_paths", "links", "transitive_links", "dynamic_loads"}


def test_plan_id_changes_with_content(make_registry):
    a = resolve(make_registry({"A": {"include": ["a"]}}))
    b = resolve(make_registry({"A": {"include": ["b"]}}))
    assert a.compute_plan_id() != b.compute_plan_id()
