import dataclasses

import pytest

from modgraph.core.resolver.errors import InvalidManifest
from modgraph.core.resolver.manifest import load


def test_load_builds_immutable_manifest():
    m = load("Engine", ["Public"], ["Core"], ["Json"], ["AssetRegistry"])

    assert m.name == "Engine"
    assert m.include_paths == ("Public",)
    assert m.public_deps == ("Core",)
    assert m.private_deps == ("Json",)
    assert m.dynamic_deps == ("AssetRegistry",)

    with pytest.raises(dataclasses.FrozenInstanceError):
        m.name = "Other"


def test_load_rejects_empty_name():
    with pytest.raises(InvalidManifest):
        load("")
    with pytest.raises(InvalidManifest):
        load("   ")


def test_load_rejects_dependency_with_two_visibilities():
    with pytest.raises(InvalidManifest) as exc:
        load("Editor", public_deps=["Core", "Slate"], private_deps=["Slate"], dynamic_deps=["Core"])

    assert exc.value.conflicts == ["Core", "Slate"]
    assert exc.value.code == "manifest.invalid"


def test_duplicates_within_one_list_collapse_keeping_order():
    m = load("A", ["inc/b", "inc/a", "inc/b"], ["Y", "X", "Y"])

    assert m.include_paths == ("inc/b", "inc/a")
    assert m.public_deps == ("Y", "X")


def test_blank_or_non_string_entries_are_invalid():
    with pytest.raises(InvalidManifest):
        load("A", public_deps=[""])
    with pytest.raises(InvalidManifest):
        load("A", include_paths=[42])


def test_all_deps_yields_every_visibility():
    m = load("A", public_deps=["P"], private_deps=["Q"], dynamic_deps=["R"])
    assert list(m.all_deps()) == [("P", "public"), ("Q", "private"), ("R", "dynamic")]


def test_physical_location_resolves_against_base_dir():
    m = load("Engine", ["Public", "/abs/include"], base_dir="Runtime/Engine")

    assert m.physical_location("Public") == "Runtime/Engine/Public"
    assert m.physical_location("../Shared") == "Runtime/Shared"
    assert m.physical_location("/abs/include") == "/abs/include"
    assert m.physical_location("Public\\Sub") == "Runtime/Engine/Public/Sub"


def test_physical_location_without_base_dir_is_normalized_path():
    m = load("Core", ["./Public/"])
    assert m.physical_location("./Public/") == "Public"
