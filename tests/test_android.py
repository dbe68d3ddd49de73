from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from calatrava.android import AndroidTreeBuilder, merge_staging, run_command
from calatrava.errors import ExternalToolError


class FakeAndroidTool:
    """Stand-in for the SDK tool: records calls and creates the project directory."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[tuple[list[str], Path]] = []

    def __call__(self, command: Sequence[str], cwd: Path) -> int:
        self.calls.append((list(command), cwd))
        if self.exit_code == 0:
            name = command[command.index("--path") + 1]
            (cwd / name / "src").mkdir(parents=True, exist_ok=True)
            (cwd / name / "AndroidManifest.xml").write_text("<manifest/>", encoding="utf-8")
        return self.exit_code


def test_command_line():
    builder = AndroidTreeBuilder()
    assert builder.command("Foo") == [
        "android",
        "create",
        "project",
        "--name",
        "Foo",
        "--path",
        "Foo",
        "--package",
        "com.Foo",
        "--target",
        "android-10",
        "--activity",
        "Launcher",
    ]


def test_build_runs_tool_in_droid_directory(tmp_path: Path):
    tool = FakeAndroidTool()
    generated = AndroidTreeBuilder(tool).build(tmp_path, "Foo")

    assert generated == tmp_path / "droid" / "Foo"
    ((command, cwd),) = tool.calls
    assert cwd == tmp_path / "droid"
    assert command[:3] == ["android", "create", "project"]
    assert (generated / "AndroidManifest.xml").is_file()


def test_build_merges_and_removes_staging(tmp_path: Path):
    staging = tmp_path / "droid" / "calatrava"
    (staging / "src" / "com" / "foo").mkdir(parents=True)
    (staging / "src" / "com" / "foo" / "Launcher.java").write_text("class Launcher {}", encoding="utf-8")
    (staging / "AndroidManifest.xml").write_text("<manifest calatrava/>", encoding="utf-8")
    (staging / "assets" / "hybrid").mkdir(parents=True)

    generated = AndroidTreeBuilder(FakeAndroidTool()).build(tmp_path, "Foo")

    assert (generated / "src" / "com" / "foo" / "Launcher.java").read_text(encoding="utf-8") == "class Launcher {}"
    assert (generated / "AndroidManifest.xml").read_text(encoding="utf-8") == "<manifest calatrava/>"
    assert (generated / "assets" / "hybrid").is_dir()
    assert not staging.exists()


def test_build_fails_on_non_zero_exit(tmp_path: Path):
    staging = tmp_path / "droid" / "calatrava"
    staging.mkdir(parents=True)
    with pytest.raises(ExternalToolError) as excinfo:
        AndroidTreeBuilder(FakeAndroidTool(exit_code=3)).build(tmp_path, "Foo")
    assert excinfo.value.exit_code == 3
    assert excinfo.value.command[0] == "android"
    assert staging.is_dir()


def test_merge_staging_without_staging_directory(tmp_path: Path):
    merge_staging(tmp_path / "missing", tmp_path / "out")
    assert not (tmp_path / "out").exists()


def test_run_command_reports_missing_executable(tmp_path: Path):
    assert run_command(["calatrava-no-such-tool-xyz"], tmp_path) == 127
