"""Shared fixtures for the npm_generator test suite.

Provides a scripted ``Prompter`` and in-memory fakes for the external
collaborators (npm registry, GitHub, git), so no test touches the network
or a real git binary.
"""

from __future__ import annotations

import os
from collections import deque
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from npm_generator.core.answers import AnswerSet
from npm_generator.core.errors import CollaboratorError
from npm_generator.core.question_catalog import SAMPLE_ANSWERS
from npm_generator.core.questions import Question
from npm_generator.helpers.collaborators import Collaborators
from npm_generator.helpers.github_client import GitHubRepository, TokenInfo

VALID_CLASSIC_TOKEN = "ghp_" + "a" * 36

# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------


class Replies:
    """Successive replies for one question id (one per prompt)."""

    def __init__(self, *values: Any) -> None:
        self.values = deque(values)


class ScriptedPrompter:
    """Answers prompts from a script; unscripted questions take the default.

    Usage::

        prompter = ScriptedPrompter({"name": "my-pkg", "add_another_dependency": Replies(True, False)})
    """

    def __init__(
        self,
        answers: dict[str, Any] | None = None,
        confirms: list[bool] | None = None,
    ) -> None:
        self.answers = dict(answers or {})
        self.confirms = deque(confirms or [])
        self.asked: list[str] = []
        self.confirm_messages: list[str] = []

    def ask(self, question: Question, default: Any) -> Any:
        self.asked.append(question.id)
        scripted = self.answers.get(question.id, default)
        if isinstance(scripted, Replies):
            if not scripted.values:
                raise AssertionError(f"No scripted reply left for '{question.id}'")
            return scripted.values.popleft()
        return scripted

    def confirm(self, message: str, default: bool = True) -> bool:
        self.confirm_messages.append(message)
        return self.confirms.popleft() if self.confirms else default


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeRegistry:
    def __init__(self, existing: set[str] | None = None) -> None:
        self.existing = set(existing or ())
        self.lookups: list[str] = []
        self.error: CollaboratorError | None = None

    def package_exists(self, package_name: str) -> bool:
        self.lookups.append(package_name)
        if self.error is not None:
            raise self.error
        return package_name in self.existing


class FakeGitHub:
    def __init__(self) -> None:
        self.scopes = frozenset({"repo"})
        self.token_error: CollaboratorError | None = None
        self.create_error: CollaboratorError | None = None
        self.created: list[tuple[str, str, bool]] = []

    def token_info(self, token: str) -> TokenInfo:
        if self.token_error is not None:
            raise self.token_error
        return TokenInfo(login="sampleuser", scopes=self.scopes)

    def create_repository(self, name: str, token: str, *, private: bool) -> GitHubRepository:
        if self.create_error is not None:
            raise self.create_error
        self.created.append((name, token, private))
        return GitHubRepository(
            full_name=f"sampleuser/{name}",
            html_url=f"https://github.com/sampleuser/{name}",
            clone_url=f"https://github.com/sampleuser/{name}.git",
            private=private,
        )


class FakeGit:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.error: CollaboratorError | None = None
        self.push_error: CollaboratorError | None = None

    def is_repository(self, cwd: Path) -> bool:
        return False

    def inside_work_tree(self, cwd: Path) -> bool:
        return False

    def init_and_commit(self, cwd: Path, message: str = "Initial commit") -> None:
        if self.error is not None:
            raise self.error
        self.calls.append(("init", cwd))

    def push_to_remote(self, cwd: Path, url: str, remote: str = "origin") -> None:
        if self.push_error is not None:
            raise self.push_error
        self.calls.append(("push", cwd))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture()
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def git() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def collaborators(
    registry: FakeRegistry,
    github: FakeGitHub,
    git: FakeGit,
    sleeps: list[float],
) -> Collaborators:
    """Collaborators backed by fakes; retries never actually sleep."""
    return Collaborators(
        registry=registry,  # type: ignore[arg-type]
        github=github,  # type: ignore[arg-type]
        git=git,  # type: ignore[arg-type]
        attempts=3,
        retry_delay=0.5,
        sleep=sleeps.append,
    )


@pytest.fixture()
def prompter_factory() -> type[ScriptedPrompter]:
    return ScriptedPrompter


@pytest.fixture()
def replies() -> type[Replies]:
    return Replies


@pytest.fixture()
def valid_token() -> str:
    return VALID_CLASSIC_TOKEN


@pytest.fixture()
def sample_answers() -> AnswerSet:
    """Normalized sample answers with a fixed copyright year."""
    return AnswerSet({**SAMPLE_ANSWERS, "copyright_year": "2024"})


@pytest.fixture()
def workdir(tmp_path: Path) -> Iterator[Path]:
    """Empty invocation directory; the test runs with it as cwd."""
    original_cwd = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)
