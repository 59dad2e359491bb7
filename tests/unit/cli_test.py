"""CLI tests for the generate and inspect commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gateway_gen.cli import generate as generate_cli
from gateway_gen.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(generate_cli.console, "width", 200)


@pytest.mark.parametrize(
    "args",
    [[], ["generate"], ["inspect"]],
    ids=["root", "generate", "inspect"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_generate_writes_gateway_file(descriptor_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(app, ["generate", str(descriptor_path), "--out", str(out)])

    assert result.exit_code == 0, result.output
    written = out / "example.com/api/library/v1/library.pb.gw.go"
    assert written.is_file()
    content = written.read_text(encoding="utf-8")
    assert "package librarypb" in content
    assert "context.WithCancel(req.Context())" in content
    assert "FieldMaskFromRequestBody" in content
    assert not (out / "example.com/api/types").exists()


def test_generate_module_from_environment(descriptor_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["generate", str(descriptor_path), "--out", str(tmp_path)],
        env={"GATEWAY_GEN_MODULE": "example.com/api"},
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "library/v1/library.pb.gw.go").is_file()


def test_generate_dry_run_writes_nothing(descriptor_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(app, ["generate", str(descriptor_path), "--out", str(out), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "(1 files)" in result.output
    assert not out.exists()


def test_generate_rejects_module_with_source_relative(descriptor_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(
        app,
        [
            "generate",
            str(descriptor_path),
            "--out",
            str(out),
            "--paths",
            "source_relative",
            "--module",
            "example.com/api",
        ],
    )

    assert result.exit_code == 1
    assert "cannot use module=example.com/api with paths=source_relative" in result.output
    assert not out.exists()


def test_generate_missing_descriptor(tmp_path: Path) -> None:
    result = runner.invoke(app, ["generate", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_inspect_lists_outputs(descriptor_path: Path) -> None:
    result = runner.invoke(app, ["inspect", str(descriptor_path), "--module", "example.com/api"])

    assert result.exit_code == 0, result.output
    assert "library/v1/library.pb.gw.go" in result.output
    assert "example/types/kind.proto" in result.output


def test_inspect_reports_prefix_mismatch(descriptor_path: Path) -> None:
    result = runner.invoke(app, ["inspect", str(descriptor_path), "--module", "other.org"])

    assert result.exit_code == 0, result.output
    assert "does not match module prefix" in result.output


def test_inspect_unknown_path_type(descriptor_path: Path) -> None:
    result = runner.invoke(app, ["inspect", str(descriptor_path), "--paths", "relative"])
    assert result.exit_code == 1
    assert "Unknown path type" in result.output
