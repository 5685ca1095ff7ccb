"""Pytest configuration and shared layout fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


def build_scenario_layout() -> Any:
    """Two groups, one bundle each, bundleA depending on bundleB."""
    from layout.model import BuildLayout

    layout = BuildLayout(tool_version="2022.3.10f1", package_version="1.21.19")
    group_a = layout.add_group(name="A", guid="guid-group-a", packing_mode="PackTogether")
    bundle_a = layout.add_bundle(group_a, name="bundleA", file_size=1024, compression="LZ4")
    group_b = layout.add_group(name="B", guid="guid-group-b", packing_mode="PackTogether")
    bundle_b = layout.add_bundle(group_b, name="bundleB", file_size=512, compression="LZ4")
    layout.add_dependency(bundle_a, bundle_b)
    layout.finalize()
    return layout


def build_sample_layout() -> Any:
    """Built-in bundle plus two groups with files, assets, and shared implicit data."""
    from core.types import SchemaData, SubFile
    from layout.model import BuildLayout

    layout = BuildLayout(tool_version="2022.3.10f1", package_version="1.21.19")
    shaders = layout.add_bundle(
        None, name="unitybuiltinshaders.bundle", file_size=2048, compression="LZ4"
    )
    layout.add_file(
        shaders,
        name="CAB-builtin",
        write_result_filename="unitybuiltinshaders.bundle",
        bundle_object_size=120,
    )
    characters = layout.add_group(
        name="Characters", guid="guid-group-characters", packing_mode="PackTogether"
    )
    layout.add_schema(
        characters,
        SchemaData(
            guid="guid-schema-bundled",
            type="BundledAssetGroupSchema",
            kvp_details=(
                ("Compression", "LZ4"),
                ("IncludeInBuild", "True"),
                ("Compression", "LZMA"),
            ),
        ),
    )
    heroes = layout.add_bundle(
        characters, name="characters_heroes.bundle", file_size=40960, compression="LZ4"
    )
    heroes_file = layout.add_file(
        heroes,
        name="CAB-heroes",
        write_result_filename="characters_heroes.bundle",
        bundle_object_size=200,
        preload_info_size=64,
        script_count=2,
        script_size=512,
    )
    layout.add_sub_file(
        heroes_file, SubFile(name="CAB-heroes.resS", is_serialized_file=False, size=30000)
    )
    knight = layout.add_asset(
        heroes_file,
        guid="guid-knight",
        asset_path="Assets/Heroes/Knight.prefab",
        addressable_name="Knight",
        serialized_size=1000,
        streamed_size=30000,
    )
    mage = layout.add_asset(
        heroes_file,
        guid="guid-mage",
        asset_path="Assets/Heroes/Mage.prefab",
        serialized_size=900,
    )
    heroes_steel = layout.add_implicit_asset(
        heroes_file,
        asset_guid="guid-steel",
        asset_path="Assets/Materials/Steel.mat",
        object_count=3,
        serialized_size=400,
    )
    layout.add_implicit_reference(knight, heroes_steel)
    layout.add_asset_reference(knight, mage)
    environment = layout.add_group(
        name="Environment", guid="guid-group-environment", packing_mode="PackSeparately"
    )
    props = layout.add_bundle(
        environment, name="environment_props.bundle", file_size=10240, compression="LZMA"
    )
    props_file = layout.add_file(
        props, name="CAB-props", write_result_filename="environment_props.bundle"
    )
    crate = layout.add_asset(
        props_file,
        guid="guid-crate",
        asset_path="Assets/Props/Crate.prefab",
        addressable_name="Crate",
        serialized_size=300,
    )
    props_steel = layout.add_implicit_asset(
        props_file,
        asset_guid="guid-steel",
        asset_path="Assets/Materials/Steel.mat",
        object_count=3,
        serialized_size=400,
    )
    layout.add_implicit_reference(crate, props_steel)
    layout.add_asset_reference(knight, crate)
    layout.add_dependency(heroes, props)
    layout.add_dependency(props, shaders)
    layout.add_dependency(heroes, shaders)
    layout.finalize()
    return layout


@pytest.fixture
def scenario_layout() -> Any:
    """Finalized two-group layout."""
    return build_scenario_layout()


@pytest.fixture
def sample_layout() -> Any:
    """Finalized layout covering every entity kind."""
    return build_sample_layout()
