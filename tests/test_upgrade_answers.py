"""Tests for project snapshots and the answers derived from them."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from npm_generator.core.errors import ManifestNotFoundError
from npm_generator.core.snapshot import ProjectSnapshot
from npm_generator.core.upgrade_answers import derive_upgrade_answers, parse_github_url


def _capture(tmp_path: Path, manifest: dict[str, Any], *extra: str) -> ProjectSnapshot:
    (tmp_path / "package.json").write_text(json.dumps(manifest))
    for rel in extra:
        target = tmp_path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("existing\n")
    return ProjectSnapshot.capture(tmp_path)


class TestSnapshot:
    def test_captures_known_files_only(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("x")
        snapshot = _capture(tmp_path, {"name": "pkg"}, "README.md")

        assert set(snapshot.files) == {"package.json", "README.md"}
        assert snapshot.manifest == {"name": "pkg"}
        assert snapshot.exists("README.md")
        assert snapshot.content("README.md") == b"existing\n"
        assert snapshot.content("LICENSE") is None

    def test_latin1_readme_is_kept_as_bytes(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(json.dumps({"name": "pkg"}))
        (tmp_path / "README.md").write_bytes(b"# caf\xe9\n")

        snapshot = ProjectSnapshot.capture(tmp_path)

        assert snapshot.exists("README.md")
        assert snapshot.content("README.md") == b"# caf\xe9\n"
        assert snapshot.manifest == {"name": "pkg"}

    def test_no_manifest(self, tmp_path: Path) -> None:
        assert ProjectSnapshot.capture(tmp_path).manifest is None

    def test_invalid_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("[1, 2]")
        with pytest.raises(ManifestNotFoundError, match="not a JSON object"):
            ProjectSnapshot.capture(tmp_path)

    def test_manifest_not_utf8(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_bytes(b'{"name": "caf\xe9"}')
        with pytest.raises(ManifestNotFoundError, match="not UTF-8"):
            ProjectSnapshot.capture(tmp_path)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("git+https://github.com/Acme/tool.git", ("acme", "tool")),
        ("git@github.com:acme/tool.git", ("acme", "tool")),
        ("https://github.com/acme/tool#readme", ("acme", "tool")),
        ("https://gitlab.com/acme/tool", None),
        (None, None),
    ],
)
def test_parse_github_url(url: str | None, expected: tuple[str, str] | None) -> None:
    assert parse_github_url(url) == expected


class TestDeriveUpgradeAnswers:
    def test_existing_tooling_becomes_seed(self, tmp_path: Path) -> None:
        snapshot = _capture(
            tmp_path,
            {
                "name": "tool",
                "version": "1.4.0",
                "license": "ISC",
                "type": "module",
                "author": "Jane Doe <jane@example.com> (https://jane.dev)",
                "repository": {"type": "git", "url": "git+https://github.com/acme/tool.git"},
                "devDependencies": {"typescript": "^5", "vitest": "^1"},
            },
            ".github/workflows/publish.yml",
        )

        derived = derive_upgrade_answers(snapshot)
        seed = derived.seed

        assert seed["use_new_dir"] == "no"
        assert seed["version"] == "1.4.0"
        assert seed["license"] == "ISC"
        assert seed["module_type"] == "esm"
        assert seed["use_typescript"] is True
        assert seed["test_framework"] == "vitest"
        assert seed["ci_provider"] == "github-actions"
        assert seed["publish_to"] == "both"
        assert seed["github_username"] == "acme"
        assert seed["github_repo_name"] == "tool"
        assert seed["create_github_repo"] is False
        assert seed["create_github_workflow"] is True
        assert (seed["author_name"], seed["author_email"], seed["author_url"]) == (
            "Jane Doe",
            "jane@example.com",
            "https://jane.dev",
        )
        assert derived.suggestions == {
            "use_eslint": False,
            "use_prettier": False,
            "create_github_pages": False,
        }

    def test_missing_features_become_suggestions(self, tmp_path: Path) -> None:
        derived = derive_upgrade_answers(_capture(tmp_path, {"name": "bare"}))

        assert derived.seed["publish_to"] == "npmjs"
        assert derived.suggestions["license"] == "MIT"
        assert derived.suggestions["module_type"] == "commonjs"
        assert derived.suggestions["test_framework"] == "none"
        assert derived.suggestions["ci_provider"] == "none"
        assert "github_username" not in derived.seed

    def test_publish_config_registry(self, tmp_path: Path) -> None:
        snapshot = _capture(
            tmp_path,
            {"name": "@acme/tool", "publishConfig": {"registry": "https://npm.pkg.github.com/"}},
        )
        seed = derive_upgrade_answers(snapshot).seed
        assert seed["publish_to"] == "github"
        assert seed["github_username"] == "acme"

    def test_custom_registry(self, tmp_path: Path) -> None:
        snapshot = _capture(
            tmp_path,
            {"name": "tool", "publishConfig": {"registry": "https://npm.example.com/repo"}},
        )
        seed = derive_upgrade_answers(snapshot).seed
        assert seed["publish_to"] == "custom"
        assert seed["custom_registry_url"] == "https://npm.example.com/repo"

    def test_pages_files_keep_pages(self, tmp_path: Path) -> None:
        derived = derive_upgrade_answers(_capture(tmp_path, {"name": "tool"}, "WEBPAGE.md"))
        assert derived.seed["create_github_pages"] is True
        assert "homepage" not in derived.seed
