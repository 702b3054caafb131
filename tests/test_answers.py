"""Tests for AnswerSet immutability and scoped answer views."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from npm_generator.core.answers import AnswerSet, token_enabled
from npm_generator.core.errors import UndeclaredDependencyError


class TestAnswerSet:
    def test_with_value_returns_new_set(self) -> None:
        original = AnswerSet({"name": "my-pkg"})
        updated = original.with_value("version", "1.0.0")

        assert "version" not in original
        assert updated["version"] == "1.0.0"
        assert updated["name"] == "my-pkg"

    def test_without_drops_keys(self) -> None:
        answers = AnswerSet({"a": 1, "b": 2, "c": 3}).without("a", "c")
        assert dict(answers) == {"b": 2}

    def test_cannot_be_mutated(self) -> None:
        answers = AnswerSet({"name": "x"})
        with pytest.raises(TypeError):
            answers["name"] = "y"  # type: ignore[index]

    def test_equality_with_plain_mapping(self) -> None:
        assert AnswerSet({"a": 1}) == {"a": 1}
        assert AnswerSet({"a": 1}) != {"a": 2}

    def test_to_dict_unwraps_nested_proxies(self) -> None:
        answers = AnswerSet({
            "dependencies": MappingProxyType({"lodash": "^4"}),
            "keywords": ("a", "b"),
        })
        assert answers.to_dict() == {"dependencies": {"lodash": "^4"}, "keywords": ["a", "b"]}


class TestScopedAnswers:
    def test_declared_ids_are_readable(self) -> None:
        scoped = AnswerSet({"publish_to": "github", "name": "x"}).scoped({"publish_to"}, "q")
        assert scoped["publish_to"] == "github"
        assert scoped.get("publish_to") == "github"
        assert list(scoped) == ["publish_to"]

    def test_undeclared_read_raises(self) -> None:
        scoped = AnswerSet({"publish_to": "github", "name": "x"}).scoped({"publish_to"}, "q")
        with pytest.raises(UndeclaredDependencyError, match="'q' read 'name'"):
            scoped["name"]
        with pytest.raises(UndeclaredDependencyError):
            scoped.get("name")

    def test_declared_but_unanswered_is_absent(self) -> None:
        scoped = AnswerSet().scoped({"github_username"}, "name")
        assert scoped.get("github_username") is None
        assert "github_username" not in scoped


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("ghp_abc", True),
        ("NA", False),
        ("skip", False),
        ("  ", False),
        (None, False),
    ],
)
def test_token_enabled(token: object, expected: bool) -> None:
    assert token_enabled(token) is expected
