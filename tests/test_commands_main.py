"""Tests for the npmgen entry point and its command dispatch."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import click
import pytest

from npm_generator.cli import commands
from npm_generator.helpers.helpers_logging import LOG_FILE_NAME, set_verbose

pytestmark = pytest.mark.cli


@pytest.fixture(autouse=True)
def _reset_verbose() -> Iterator[None]:
    yield
    set_verbose(False)


def _run(*argv: str) -> int:
    with patch("sys.argv", ["npmgen", *argv]):
        return commands.main()


class TestCommandsMainAbortHandling:
    def test_main_handles_click_abort_with_friendly_message(
        self,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with patch.object(commands._click_cli, "main", side_effect=click.Abort()):
            result = _run("init")

        assert result == 130
        assert "Cancelled by user" in capsys.readouterr().out

    def test_main_handles_click_exception(
        self,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        exc = click.ClickException("boom")
        with patch.object(commands._click_cli, "main", side_effect=exc):
            result = _run("upgrade")

        assert result == exc.exit_code
        assert "Error: boom" in capsys.readouterr().err

    def test_invalid_bump_type_is_a_usage_error(
        self, workdir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run("bump", "huge") == 2
        assert "huge" in capsys.readouterr().err


class TestHelp:
    @pytest.mark.parametrize("argv", [(), ("help",), ("--help",)])
    def test_help_lists_commands(self, argv: tuple[str, ...], capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(*argv) == 0
        out = capsys.readouterr().out
        for name in commands.COMMANDS:
            assert f"  {name:10} - " in out

    def test_unknown_command_name(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert commands.execute_command("publish", []) == 1
        assert "Unknown command: publish" in capsys.readouterr().out


class TestBumpCommand:
    def test_bump_minor(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / "package.json").write_text(json.dumps({"name": "pkg", "version": "1.2.3"}))

        assert _run("bump", "minor") == 0

        assert json.loads((workdir / "package.json").read_text())["version"] == "1.3.0"
        assert "Version bumped: 1.2.3 → 1.3.0" in capsys.readouterr().out

    def test_bump_defaults_to_patch_dry_run(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / "package.json").write_text(json.dumps({"name": "pkg", "version": "1.2.3"}))

        assert _run("bump", "--dry-run") == 0

        assert json.loads((workdir / "package.json").read_text())["version"] == "1.2.3"
        assert "Would bump version: 1.2.3 → 1.2.4" in capsys.readouterr().out

    def test_bump_without_manifest(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run("bump") == 1
        assert "No package.json found" in capsys.readouterr().out

    def test_verbose_writes_log_file(self, workdir: Path) -> None:
        (workdir / "package.json").write_text(json.dumps({"name": "pkg", "version": "0.1.0"}))
        assert _run("bump", "--verbose") == 0
        assert (workdir / LOG_FILE_NAME).is_file()


class TestInitCommand:
    def test_sample_non_interactive(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run("init", "--sample", "--non-interactive", "--no-git") == 0

        project = workdir / "sample-package"
        assert (project / "package.json").is_file()
        assert (project / "LICENSE").is_file()
        assert "Next steps" in capsys.readouterr().out

    def test_sample_dry_run(self, workdir: Path) -> None:
        assert _run("init", "--sample", "--dry-run", "--non-interactive") == 0
        assert list(workdir.iterdir()) == []

    def test_invalid_config_lists_errors(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = workdir / "npmgen.json"
        config.write_text(json.dumps({"nme": "typo"}))

        assert _run("init", "--config", str(config), "--non-interactive") == 1

        out = capsys.readouterr().out
        assert "Invalid configuration:" in out
        assert "Unknown config key 'nme'" in out

    def test_conflict_returns_error(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / "sample-package").mkdir()
        assert _run("init", "--sample", "--non-interactive", "--no-git") == 1
        assert "already exists" in capsys.readouterr().out


class TestUpgradeCommand:
    def test_upgrade_without_manifest(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run("upgrade", "--non-interactive") == 1
        assert "npmgen init" in capsys.readouterr().out

    def test_upgrade_non_interactive(self, workdir: Path) -> None:
        (workdir / "package.json").write_text(json.dumps({"name": "legacy-pkg", "version": "1.0.0"}))

        assert _run("upgrade", "--non-interactive") == 0

        manifest = json.loads((workdir / "package.json").read_text())
        assert manifest["version"] == "1.0.0"
        assert "release" in manifest["scripts"]
