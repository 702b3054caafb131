"""Tests for the shipped question catalog: naming rules, checks, normal form."""

from __future__ import annotations

from typing import Any

import pytest

from npm_generator.core.answers import AnswerSet
from npm_generator.core.question_catalog import (
    QUESTION_GRAPH,
    SAMPLE_ANSWERS,
    ensure_https,
    expand_seed,
    normalize_answers,
    parse_scripts,
    split_keywords,
    unscoped_name,
    validate_package_name,
)
from npm_generator.core.questions import Question
from npm_generator.core.resolver import QuestionResolver
from npm_generator.helpers.collaborators import Collaborators
from npm_generator.helpers.github_client import GitHubError


def _question(qid: str) -> Question:
    node = QUESTION_GRAPH.node(qid)
    assert isinstance(node, Question)
    return node


class TestPackageNames:
    def test_plain_lowercase_name_is_valid(self) -> None:
        assert validate_package_name("my-pkg", "npmjs", None) is None

    def test_uppercase_and_underscore_rejected(self) -> None:
        error = validate_package_name("My_Pkg", "npmjs", None)
        assert error is not None
        assert "lowercase" in error

    def test_scoped_name_allowed_on_npmjs(self) -> None:
        assert validate_package_name("@scope/pkg", "npmjs", None) is None

    def test_github_requires_user_scope(self) -> None:
        assert validate_package_name("@sampleuser/pkg", "github", "sampleuser") is None
        assert "requires scoped packages" in (validate_package_name("pkg", "github", "sampleuser") or "")
        assert validate_package_name("@other/pkg", "github", "sampleuser") is not None

    def test_both_rejects_foreign_scope(self) -> None:
        assert validate_package_name("pkg", "both", "sampleuser") is None
        error = validate_package_name("@other/pkg", "both", "sampleuser")
        assert error is not None
        assert "@sampleuser" in error

    def test_reserved_and_empty_names(self) -> None:
        assert "reserved" in (validate_package_name("node", "npmjs", None) or "")
        assert validate_package_name("", "npmjs", None) == "Package name is required"

    def test_unscoped_name(self) -> None:
        assert unscoped_name("@scope/pkg") == "pkg"
        assert unscoped_name("pkg") == "pkg"


class TestTransforms:
    def test_split_keywords(self) -> None:
        assert split_keywords("cli, tool,, npm ") == ("cli", "tool", "npm")
        assert split_keywords(["a", " b "]) == ("a", "b")

    def test_parse_scripts(self) -> None:
        scripts = parse_scripts("build:tsc, lint:eslint .")
        assert dict(scripts) == {"build": "tsc", "lint": "eslint ."}

    def test_ensure_https(self) -> None:
        assert ensure_https("example.com") == "https://example.com"
        assert ensure_https("http://example.com") == "http://example.com"
        assert ensure_https("") == ""


class TestRemoteChecks:
    def test_existing_npm_name_rejected(self, collaborators: Collaborators, registry: Any) -> None:
        registry.existing.add("taken")
        scoped = AnswerSet({"publish_to": "npmjs"}).scoped({"publish_to", "github_username"}, "name")
        message = _question("name").remote_check("taken", scoped, collaborators)  # type: ignore[misc]
        assert message == "Package taken already exists on npm. Choose another name."

    def test_github_only_name_is_not_looked_up(self, collaborators: Collaborators, registry: Any) -> None:
        scoped = AnswerSet({"publish_to": "github"}).scoped({"publish_to", "github_username"}, "name")
        assert _question("name").remote_check("@u/pkg", scoped, collaborators) is None  # type: ignore[misc]
        assert registry.lookups == []

    def test_token_without_repo_scope(
        self, collaborators: Collaborators, github: Any, valid_token: str
    ) -> None:
        github.scopes = frozenset({"read:packages"})
        message = _question("github_token").remote_check(valid_token, None, collaborators)  # type: ignore[misc]
        assert message == "GitHub classic token must have 'repo' scope."

    def test_rejected_token(self, collaborators: Collaborators, github: Any, valid_token: str) -> None:
        github.token_error = GitHubError("unauthorized", status_code=401)
        message = _question("github_token").remote_check(valid_token, None, collaborators)  # type: ignore[misc]
        assert message is not None
        assert message.startswith("Invalid GitHub classic token")

    def test_skip_token_is_not_verified(self, collaborators: Collaborators, github: Any) -> None:
        github.token_error = GitHubError("should not be called", status_code=500)
        assert _question("github_token").remote_check("NA", None, collaborators) is None  # type: ignore[misc]

    def test_unknown_dependency_rejected(self, collaborators: Collaborators) -> None:
        group = QUESTION_GRAPH.node("dependency_list")
        member = group.members[0]  # type: ignore[union-attr]
        message = member.remote_check("no-such-pkg", None, collaborators)
        assert message == 'Package "no-such-pkg" not found in npm registry'


class TestNormalForm:
    def test_sample_answers_resolve_without_prompting(
        self, collaborators: Collaborators, prompter_factory: Any
    ) -> None:
        prompter = prompter_factory()
        resolver = QuestionResolver(QUESTION_GRAPH, prompter, collaborators, interactive=False)
        seed = expand_seed({**SAMPLE_ANSWERS, "copyright_year": "2024"})

        answers = normalize_answers(resolver.resolve(seed))

        assert prompter.asked == []
        assert answers.to_dict() == AnswerSet({**SAMPLE_ANSWERS, "copyright_year": "2024"}).to_dict()

    def test_normalize_folds_custom_version_and_groups(self) -> None:
        normalized = normalize_answers({
            "version": "custom",
            "custom_version": "2.3.4",
            "add_dependency": True,
            "dependency_list": ({"dependency_name": "lodash", "dependency_version": "^4"},),
            "add_dev_dependency": False,
            "add_custom_scripts": False,
        })
        assert normalized.to_dict() == {
            "version": "2.3.4",
            "dependencies": {"lodash": "^4"},
            "dev_dependencies": {},
            "custom_scripts": {},
        }

    def test_expand_seed_reverses_normalize(self) -> None:
        seed = expand_seed({
            "version": "2.3.4",
            "dependencies": {"lodash": "^4"},
            "dev_dependencies": {},
            "custom_scripts": {"docs": "typedoc"},
        })
        assert seed == {
            "version": "custom",
            "custom_version": "2.3.4",
            "add_dependency": True,
            "dependency_list": [{"dependency_name": "lodash", "dependency_version": "^4"}],
            "add_dev_dependency": False,
            "custom_scripts": {"docs": "typedoc"},
            "add_custom_scripts": True,
        }

    @pytest.mark.parametrize("version", ["0.0.1", "1.0.0"])
    def test_listed_versions_stay_choices(self, version: str) -> None:
        assert expand_seed({"version": version}) == {"version": version}
