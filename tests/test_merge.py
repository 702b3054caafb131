"""Tests for the upgrade merge engine: skip lists, manifest merge, plans."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from npm_generator.core.answers import AnswerSet
from npm_generator.core.artifacts import generate_all, resolve_paths
from npm_generator.core.errors import MergeInvariantViolation
from npm_generator.core.merge import (
    MergeAction,
    check_merge_invariant,
    compute_skip_list,
    format_merge_report,
    merge_manifest,
    plan_merge,
)
from npm_generator.core.snapshot import ProjectSnapshot
from npm_generator.scaffolding import build_manifest

_EXISTING: dict[str, Any] = {
    "name": "legacy-name",
    "version": "2.0.0",
    "main": "lib/index.js",
    "scripts": {"test": "mocha", "release": "np"},
    "dependencies": {"lodash": "^3.0.0"},
    "engines": {"node": ">=18"},
}


@pytest.fixture()
def candidate(sample_answers: AnswerSet) -> dict[str, Any]:
    answers = sample_answers.with_value("dependencies", {"lodash": "^4.17.21", "chalk": "^5.0.0"})
    return build_manifest(answers)


class TestMergeManifest:
    def test_existing_keys_survive(self, candidate: dict[str, Any]) -> None:
        merged = merge_manifest(_EXISTING, candidate)

        for key in _EXISTING:
            assert key in merged
        assert merged["engines"] == {"node": ">=18"}
        assert merged["name"] == "legacy-name"
        assert merged["version"] == "2.0.0"

    def test_user_scripts_win_except_tool_owned(self, candidate: dict[str, Any]) -> None:
        scripts = merge_manifest(_EXISTING, candidate)["scripts"]

        assert scripts["test"] == "mocha"
        assert scripts["release"] == "npmgen bump patch && npm publish"
        assert scripts["bootstrap"] == "npm install"

    def test_dependencies_union_existing_wins(self, candidate: dict[str, Any]) -> None:
        merged = merge_manifest(_EXISTING, candidate)
        assert merged["dependencies"] == {"lodash": "^3.0.0", "chalk": "^5.0.0"}

    def test_tool_owned_fields_replaced(self, candidate: dict[str, Any]) -> None:
        merged = merge_manifest(_EXISTING, candidate)
        assert merged["main"] == "src/index.js"
        assert merged["publishConfig"] == {"access": "public"}

    def test_existing_manifest_not_mutated(self, candidate: dict[str, Any]) -> None:
        before = copy.deepcopy(_EXISTING)
        merge_manifest(_EXISTING, candidate)
        assert before == _EXISTING

    def test_merge_is_idempotent(self, candidate: dict[str, Any]) -> None:
        once = merge_manifest(_EXISTING, candidate)
        assert merge_manifest(once, candidate) == once

    def test_existing_key_order_kept(self, candidate: dict[str, Any]) -> None:
        merged = merge_manifest(_EXISTING, candidate)
        assert list(merged)[: len(_EXISTING)] == list(_EXISTING)


class TestMergeInvariant:
    def test_missing_top_level_and_nested_keys(self) -> None:
        with pytest.raises(MergeInvariantViolation) as exc_info:
            check_merge_invariant(
                {"x": 1, "scripts": {"a": "1"}, "devDependencies": {"jest": "29"}},
                {"scripts": {}, "devDependencies": {"jest": "29"}},
            )
        assert exc_info.value.missing == ["x", "scripts.a"]

    def test_superset_passes(self) -> None:
        check_merge_invariant({"a": 1}, {"a": 2, "b": 3})


def _project(tmp_path: Path, files: dict[str, str]) -> ProjectSnapshot:
    for rel, content in files.items():
        target = tmp_path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return ProjectSnapshot.capture(tmp_path)


class TestPlan:
    def test_skip_list_covers_existing_opaque_files(self, tmp_path: Path, sample_answers: AnswerSet) -> None:
        snapshot = _project(tmp_path, {
            "package.json": json.dumps(_EXISTING),
            "README.md": "# mine\n",
            "LICENSE": "custom\n",
        })
        skip = compute_skip_list(resolve_paths(sample_answers), snapshot)
        assert skip == frozenset({"readme", "license"})

    def test_plan_actions(self, tmp_path: Path, sample_answers: AnswerSet) -> None:
        snapshot = _project(tmp_path, {
            "package.json": json.dumps(_EXISTING),
            "README.md": "# mine\n",
        })
        paths = resolve_paths(sample_answers)
        skip = compute_skip_list(paths, snapshot)
        plan = plan_merge(generate_all(sample_answers, skip=skip), paths, snapshot, skip)

        assert plan.decision("manifest").action is MergeAction.MERGE
        assert plan.decision("readme").action is MergeAction.SKIP
        assert plan.decision("readme").content is None
        assert plan.decision("gitignore").action is MergeAction.WRITE
        assert [d.artifact_id for d in plan.writes()] == [i for i in paths if i != "readme"]

        merged = json.loads(plan.decision("manifest").content or "")
        assert merged["engines"] == {"node": ">=18"}
        assert "scripts.bootstrap added" in plan.decision("manifest").changes
        assert "scripts.release updated" in plan.decision("manifest").changes

    def test_skipped_files_untouched_in_plan(self, tmp_path: Path, sample_answers: AnswerSet) -> None:
        snapshot = _project(tmp_path, {"package.json": "{}", ".gitignore": "custom\n"})
        paths = resolve_paths(sample_answers)
        plan = plan_merge(generate_all(sample_answers), paths, snapshot)
        assert plan.decision("gitignore").action is MergeAction.SKIP
        assert "gitignore" in plan.skip_list

    def test_report_lines(self, tmp_path: Path, sample_answers: AnswerSet) -> None:
        snapshot = _project(tmp_path, {"package.json": json.dumps(_EXISTING)})
        paths = resolve_paths(sample_answers)
        lines = format_merge_report(plan_merge(generate_all(sample_answers), paths, snapshot))

        assert lines[0] == "Tool-owned keys declaration v1"
        assert lines[1] == "merge package.json"
        assert "      - scripts.bootstrap added" in lines

    def test_unknown_decision(self, tmp_path: Path, sample_answers: AnswerSet) -> None:
        snapshot = _project(tmp_path, {"package.json": "{}"})
        paths = resolve_paths(sample_answers)
        plan = plan_merge(generate_all(sample_answers), paths, snapshot)
        with pytest.raises(KeyError):
            plan.decision("tsconfig")
