from __future__ import annotations

import os
from pathlib import Path

import pytest

from calatrava.errors import SerializationError, UnsupportedEntryError
from calatrava.xcode.builder import SYSTEM_FRAMEWORKS, XcodeProjectBuilder
from calatrava.xcode.model import APPLICATION_PRODUCT_TYPE, Group
from calatrava.xcode.settings import DEFAULT_BUILD_SETTINGS, EXCLUDED_SETTINGS, BuildSettingsTable, project_settings

IOS_TREE = {
    "ios/src/Foo-Info.plist": "<plist/>",
    "ios/src/Foo-Prefix.pch": "",
    "ios/src/main.m": "int main(void) { return 0; }",
    "ios/src/Controllers/HomeController.m": "",
    "ios/src/Controllers/HomeController.h": "",
    "ios/README.md": "not part of the sources",
}


@pytest.fixture()
def builder() -> XcodeProjectBuilder:
    return XcodeProjectBuilder()


def _names(group: Group) -> list:
    return [
        (child.name, _names(child)) if isinstance(child, Group) else child.name
        for child in group.children
    ]


def test_build_mirrors_source_tree(make_tree, builder: XcodeProjectBuilder):
    root = make_tree(IOS_TREE, name="Foo")
    project = builder.build("Foo", root / "ios")

    assert _names(project.main_group) == [
        ("Controllers", ["HomeController.h", "HomeController.m"]),
        "Foo-Info.plist",
        "Foo-Prefix.pch",
        "main.m",
    ]
    (target,) = project.targets
    assert target.product_name == "Foo"
    assert target.product_type == APPLICATION_PRODUCT_TYPE
    assert [description.file.path for description in target.source_files] == [
        ref.path for ref in project.main_group.walk_files()
    ]
    assert all(path.startswith("src/") for path in (d.file.path for d in target.source_files))
    assert project.frameworks == list(SYSTEM_FRAMEWORKS)


@pytest.mark.parametrize("configuration", ["Debug", "Release"])
def test_target_settings_merge_order(builder: XcodeProjectBuilder, configuration: str):
    target = builder.create_target("Foo")
    settings = target.configuration(configuration).build_settings

    expected = DEFAULT_BUILD_SETTINGS.common("ios")
    expected.update(DEFAULT_BUILD_SETTINGS.for_configuration("ios", configuration) or {})
    expected.update(project_settings("Foo"))
    for key in EXCLUDED_SETTINGS:
        expected.pop(key)

    assert settings == expected
    assert "DSTROOT" not in settings
    assert "INSTALL_PATH" not in settings
    assert settings["SKIP_INSTALL"] == "NO"
    assert settings["IPHONEOS_DEPLOYMENT_TARGET"] == "5.0"


def test_release_only_settings(builder: XcodeProjectBuilder):
    target = builder.create_target("Foo")
    assert target.configuration("Release").build_settings["VALIDATE_PRODUCT"] == "YES"
    assert "VALIDATE_PRODUCT" not in target.configuration("Debug").build_settings


def test_alternate_settings_table():
    table = BuildSettingsTable({"ios": {"CUSTOM": "1", "INSTALL_PATH": "/x"}})
    target = XcodeProjectBuilder(table, configurations=("Beta",)).create_target("Foo")
    (configuration,) = target.build_configurations
    assert configuration.name == "Beta"
    assert configuration.build_settings["CUSTOM"] == "1"
    assert "INSTALL_PATH" not in configuration.build_settings


def test_create_project_file(make_tree, builder: XcodeProjectBuilder):
    root = make_tree(IOS_TREE, name="Foo")
    written = builder.create_project_file("Foo", root / "ios")

    assert written == root / "ios" / "Foo.xcodeproj" / "project.pbxproj"
    text = written.read_text(encoding="utf-8")
    for framework in SYSTEM_FRAMEWORKS:
        assert f"{framework}.framework" in text
    assert "path = src/Controllers/HomeController.m;" in text
    assert "README.md" not in text


def test_create_project_file_overwrites(make_tree, builder: XcodeProjectBuilder):
    root = make_tree(IOS_TREE, name="Foo")
    bundle = root / "ios" / "Foo.xcodeproj"
    bundle.mkdir(parents=True)
    (bundle / "project.pbxproj").write_text("stale", encoding="utf-8")
    first = builder.create_project_file("Foo", root / "ios").read_text(encoding="utf-8")
    second = builder.create_project_file("Foo", root / "ios").read_text(encoding="utf-8")
    assert first == second
    assert first != "stale"


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires os.mkfifo")
def test_unsupported_entry_writes_nothing(make_tree, builder: XcodeProjectBuilder):
    root = make_tree(IOS_TREE, name="Foo")
    os.mkfifo(root / "ios" / "src" / "Controllers" / "pipe")
    with pytest.raises(UnsupportedEntryError):
        builder.create_project_file("Foo", root / "ios")
    assert not (root / "ios" / "Foo.xcodeproj").exists()


def test_serialization_failure_leaves_existing_file(make_tree, tmp_path: Path):
    root = make_tree(IOS_TREE, name="Foo")
    table = BuildSettingsTable({"ios": {"A": "1"}})
    builder = XcodeProjectBuilder(table)
    project = builder.build("Foo", root / "ios")
    project.targets[0].build_configurations[0].build_settings["BAD"] = None  # type: ignore[assignment]

    bundle = tmp_path / "Out.xcodeproj"
    bundle.mkdir()
    (bundle / "project.pbxproj").write_text("previous", encoding="utf-8")
    with pytest.raises(SerializationError):
        builder.save(project, bundle)
    assert (bundle / "project.pbxproj").read_text(encoding="utf-8") == "previous"
