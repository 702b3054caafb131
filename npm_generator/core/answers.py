"""Immutable answer sets.

An ``AnswerSet`` is built one resolved question at a time; every
``with_value`` call returns a new set, so a validator that re-runs against
an in-progress set never sees half-applied state.

Example:
    >>> answers = AnswerSet().with_value("name", "my-pkg")
    >>> answers["name"]
    'my-pkg'
    >>> "homepage" in answers
    False
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .errors import UndeclaredDependencyError

# Tokens that disable every token-gated side effect.
SKIP_TOKEN_VALUES = frozenset({"na", "skip", ""})

SECRET_SUFFIX = "_token"


class AnswerSet(Mapping[str, Any]):
    """Read-only mapping of question id to resolved value."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: Mapping[str, Any] = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AnswerSet({dict(self._values)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def with_value(self, key: str, value: Any) -> AnswerSet:
        """Return a new set with ``key`` bound to ``value``."""
        updated = dict(self._values)
        updated[key] = value
        return AnswerSet(updated)

    def without(self, *keys: str) -> AnswerSet:
        """Return a new set with ``keys`` removed."""
        return AnswerSet({k: v for k, v in self._values.items() if k not in keys})

    def scoped(self, allowed: Iterable[str], owner: str) -> ScopedAnswers:
        """Return a view that only exposes the ids ``owner`` depends on."""
        return ScopedAnswers(self, frozenset(allowed), owner)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain (JSON-friendly) copy of the answers."""
        return {key: _plain(value) for key, value in self._values.items()}


class ScopedAnswers(Mapping[str, Any]):
    """Answer view restricted to a question's declared dependencies.

    Reading an id outside the declared set is a defect in the question
    catalog, not a missing answer, so it raises instead of returning None.
    """

    __slots__ = ("_answers", "_allowed", "_owner")

    def __init__(self, answers: AnswerSet, allowed: frozenset[str], owner: str) -> None:
        self._answers = answers
        self._allowed = allowed
        self._owner = owner

    def _guard(self, key: str) -> None:
        if key not in self._allowed:
            raise UndeclaredDependencyError(
                f"Question '{self._owner}' read '{key}' without declaring it in depends_on"
            )

    def __getitem__(self, key: str) -> Any:
        self._guard(key)
        return self._answers[key]

    def get(self, key: str, default: Any = None) -> Any:
        self._guard(key)
        return self._answers.get(key, default)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            self._guard(key)
        return key in self._answers

    def __iter__(self) -> Iterator[str]:
        return (key for key in self._answers if key in self._allowed)

    def __len__(self) -> int:
        return sum(1 for _ in self)


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def token_enabled(token: object) -> bool:
    """Return True if ``token`` is a usable token (not NA/skip/empty)."""
    return isinstance(token, str) and token.strip().lower() not in SKIP_TOKEN_VALUES


def is_secret(answer_id: str) -> bool:
    """Token answers are never written to disk."""
    return answer_id.endswith(SECRET_SUFFIX)


def without_secrets(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``values`` minus every token answer."""
    return {k: v for k, v in values.items() if not is_secret(k)}
