from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from calatrava.cli import _parse_key_value_pairs, main


def test_parse_key_value_pairs():
    context = _parse_key_value_pairs(["name=demo", "version=1.0"])
    assert context == {"name": "demo", "version": "1.0"}

    with pytest.raises(argparse.ArgumentTypeError):
        _parse_key_value_pairs(["invalid"])


@pytest.fixture()
def template_dir(make_tree) -> Path:
    return make_tree(
        {
            "README.md": "readme",
            "kernel/app/shell": None,
            "ios/src/main.m.calatrava": "// {{ project_name }}{{#is_dev}} dev{{/is_dev}}\n",
        }
    )


def test_cli_create_without_android(tmp_path: Path, template_dir: Path, capsys: pytest.CaptureFixture[str]):
    workspace = tmp_path / "workspace"
    exit_code = main(
        ["create", "Foo", "--template", str(template_dir), "--directory", str(workspace), "--dev", "--no-android"]
    )
    assert exit_code == 0
    project = workspace / "Foo"
    assert (project / "README.md").read_text(encoding="utf-8") == "readme"
    assert (project / "ios" / "src" / "main.m").read_text(encoding="utf-8") == "// Foo dev\n"
    assert (project / "ios" / "Foo.xcodeproj" / "project.pbxproj").is_file()
    assert "Project created at" in capsys.readouterr().out


def test_cli_queries(tmp_path: Path, template_dir: Path, capsys: pytest.CaptureFixture[str]):
    workspace = tmp_path / "workspace"
    main(["create", "Foo", "-t", str(template_dir), "-d", str(workspace), "--no-android", "--no-ios"])
    capsys.readouterr()

    assert main(["modules", str(workspace / "Foo")]) == 0
    assert capsys.readouterr().out == "shell\n"
    assert main(["src-paths", str(workspace / "Foo")]) == 0
    assert capsys.readouterr().out == "app/shell\n"


def test_cli_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    (tmp_path / "NoMeta").mkdir()
    assert main(["modules", str(tmp_path / "NoMeta")]) == 1
    assert "metadata file not found" in capsys.readouterr().err


def test_cli_missing_template(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    exit_code = main(["create", "Foo", "-t", str(tmp_path / "nope"), "-d", str(tmp_path)])
    assert exit_code == 1
    assert "calatrava:" in capsys.readouterr().err


def test_cli_render_writes_to_output(tmp_path: Path):
    template_path = tmp_path / "template.txt"
    template_path.write_text("Hello {{ name }}", encoding="utf-8")
    output_path = tmp_path / "output.txt"
    exit_code = main(
        [
            "render",
            str(template_path),
            "-c",
            "name=world",
            "-o",
            str(output_path),
            "--missing",
            "error",
        ]
    )
    assert exit_code == 0
    assert output_path.read_text(encoding="utf-8") == "Hello world"


def test_cli_render_syntax_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    template_path = tmp_path / "template.txt"
    template_path.write_text("{{#open}}", encoding="utf-8")
    assert main(["render", str(template_path)]) == 1
    assert "never closed" in capsys.readouterr().err


def test_cli_rejects_malformed_set_option(tmp_path: Path, template_dir: Path, capsys: pytest.CaptureFixture[str]):
    exit_code = main(["create", "Foo", "-t", str(template_dir), "-d", str(tmp_path), "-s", "foo"])
    assert exit_code == 1
    assert "invalid key/value pair 'foo'" in capsys.readouterr().err
    assert not (tmp_path / "Foo").exists()


def test_cli_rejects_project_name_override(tmp_path: Path, template_dir: Path, capsys: pytest.CaptureFixture[str]):
    exit_code = main(["create", "Foo", "-t", str(template_dir), "-d", str(tmp_path), "-s", "project_name=Bar"])
    assert exit_code == 1
    assert "cannot override project_name" in capsys.readouterr().err
    assert not (tmp_path / "Foo").exists()
