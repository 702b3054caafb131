"""Error taxonomy for npm package generation.

Recoverable:
    ValidationError: one answer failed its predicate; the question is re-asked.
    CollaboratorError: a network or external tool call failed after retries.

Fatal:
    ConflictError: init would overwrite an existing directory or file.
    ManifestNotFoundError: upgrade was run outside a package.
    MergeInvariantViolation: an upgrade would drop existing manifest keys.
    QuestionGraphError: the question catalog itself is malformed.
    StateTransitionError: an artifact skipped a lifecycle step.
"""

from __future__ import annotations


class NpmGeneratorError(Exception):
    """Base class for all errors raised by npm_generator."""


class ValidationError(NpmGeneratorError):
    """A single answer failed validation."""

    def __init__(self, question_id: str, message: str) -> None:
        super().__init__(f"{question_id}: {message}")
        self.question_id = question_id
        self.message = message


class ConfigError(NpmGeneratorError):
    """A supplied config document failed validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid configuration: " + "; ".join(errors))
        self.errors = errors


class CollaboratorError(NpmGeneratorError):
    """An external service (registry, GitHub, git) failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConflictError(NpmGeneratorError):
    """Target directory or file already exists where none was expected."""


class ManifestNotFoundError(NpmGeneratorError):
    """No package.json in the directory being upgraded."""


class MergeInvariantViolation(NpmGeneratorError):
    """A merge result lost keys that existed in the project manifest."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Merge would delete existing manifest keys: " + ", ".join(missing)
        )
        self.missing = missing


class QuestionGraphError(NpmGeneratorError):
    """The question graph has duplicate ids or forward references."""


class UndeclaredDependencyError(QuestionGraphError):
    """A question read an answer it did not declare in depends_on."""


class StateTransitionError(NpmGeneratorError):
    """An artifact was moved to a state its current state cannot reach."""
