"""Question graph resolver.

Walks a ``QuestionGraph`` in declaration order and produces an
``AnswerSet``. Each question is either skipped (its ``when`` predicate is
false), taken from the seed, or prompted until it validates.

Validation runs in two phases:

1. built-in type/enum checks plus the question's synchronous ``check``;
2. only if phase one passed, the question's ``remote_check`` wrapped in a
   bounded retry. A collaborator that keeps failing is reported as a
   validation failure, so the question is asked again.

Seed values (sample answers, recovery state, answers derived from an
existing manifest) skip phase two. Values coming from ``defaults`` or from
the prompt go through both phases. Seeded ids listed in ``trusted`` (the
identity of an already published package) are taken as given.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from npm_generator.helpers.collaborators import Collaborators
from npm_generator.helpers.helpers_logging import print_debug, print_warning
from npm_generator.helpers.prompting import Prompter
from npm_generator.helpers.retry import with_retries

from .answers import AnswerSet, ScopedAnswers, without_secrets
from .errors import CollaboratorError, ValidationError
from .questions import Question, QuestionGraph, QuestionKind, RemoteCheck, RepeatGroup

_MISSING = object()

_TRUE_STRINGS = frozenset({"yes", "y", "true", "1"})
_FALSE_STRINGS = frozenset({"no", "n", "false", "0"})


class QuestionResolver:
    """Resolves a question graph into an immutable answer set."""

    def __init__(
        self,
        graph: QuestionGraph,
        prompter: Prompter,
        collaborators: Collaborators,
        *,
        interactive: bool = True,
        remote_checks: bool = True,
    ) -> None:
        self._graph = graph
        self._prompter = prompter
        self._collaborators = collaborators
        self._interactive = interactive
        self._remote_checks = remote_checks

    def resolve(
        self,
        seed: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
        *,
        trusted: Iterable[str] = (),
    ) -> AnswerSet:
        """Resolve every applicable question.

        Args:
            seed: Values accepted without prompting (after synchronous checks)
            defaults: Values that replace a question's own default
            trusted: Seeded ids accepted without any validation

        Returns:
            The resolved answer set (inapplicable questions are absent)

        Raises:
            ValidationError: In non-interactive mode, when a value is invalid
        """
        seed = dict(seed or {})
        defaults = dict(defaults or {})
        trusted = frozenset(trusted)
        answers = AnswerSet()

        for node in self._graph:
            if isinstance(node, RepeatGroup):
                answers = self._resolve_group(node, answers, seed, defaults)
                continue
            scoped = answers.scoped(node.depends_on, node.id)
            if node.when is not None and not node.when(scoped):
                print_debug(f"Skipping question '{node.id}' (not applicable)")
                continue
            if node.id in trusted and node.id in seed:
                answers = answers.with_value(node.id, _coerce(node, seed[node.id]))
                continue
            value = self._resolve_question(
                node,
                scoped,
                seed.get(node.id, _MISSING),
                defaults.get(node.id, _MISSING),
            )
            answers = answers.with_value(node.id, value)

        print_debug("Resolved answers", without_secrets(answers.to_dict()))
        return answers

    # ------------------------------------------------------------------
    # Single questions
    # ------------------------------------------------------------------

    def _resolve_question(
        self,
        question: Question,
        scoped: ScopedAnswers,
        seeded: Any,
        override: Any,
    ) -> Any:
        if seeded is not _MISSING:
            try:
                return self.validate(question, seeded, scoped, remote=False)
            except ValidationError as exc:
                if not self._interactive or question.silent:
                    raise
                print_warning(f"Saved answer for '{question.id}' rejected: {exc.message}")
                default = seeded
        elif override is not _MISSING:
            default = override
        else:
            default = self._default(question, scoped)

        if question.silent or not self._interactive:
            return self.validate(question, default, scoped, remote=True)
        return self._prompt_until_valid(question, scoped, default)

    @staticmethod
    def _default(question: Question, scoped: ScopedAnswers) -> Any:
        if question.default_from is not None:
            return question.default_from(scoped)
        return question.default

    def _prompt_until_valid(self, question: Question, scoped: ScopedAnswers, default: Any) -> Any:
        while True:
            raw = self._prompter.ask(question, default)
            try:
                return self.validate(question, raw, scoped, remote=True)
            except ValidationError as exc:
                print_warning(exc.message)

    def validate(
        self,
        question: Question,
        raw: Any,
        scoped: ScopedAnswers,
        *,
        remote: bool,
    ) -> Any:
        """Normalize and validate ``raw`` for ``question``.

        Returns:
            The transformed value

        Raises:
            ValidationError: If either validation phase fails
        """
        value = check_value(question, raw, scoped)
        remote_check = question.remote_check
        if remote and self._remote_checks and remote_check is not None:
            error = self._run_remote_check(question, remote_check, value, scoped)
            if error is not None:
                raise ValidationError(question.id, error)
        return value

    def _run_remote_check(
        self,
        question: Question,
        remote_check: RemoteCheck,
        value: Any,
        scoped: ScopedAnswers,
    ) -> str | None:
        collaborators = self._collaborators

        def _on_error(exc: CollaboratorError, attempt: int) -> None:
            print_debug(f"Remote check for '{question.id}' failed (attempt {attempt}): {exc}")

        try:
            return with_retries(
                lambda: remote_check(value, scoped, collaborators),
                attempts=collaborators.attempts,
                delay=collaborators.retry_delay,
                on_error=_on_error,
                sleep=collaborators.sleep,
            )
        except CollaboratorError as exc:
            return f"Could not verify {question.id}: {exc}"

    # ------------------------------------------------------------------
    # Repeat groups
    # ------------------------------------------------------------------

    def _resolve_group(
        self,
        group: RepeatGroup,
        answers: AnswerSet,
        seed: Mapping[str, Any],
        defaults: Mapping[str, Any],
    ) -> AnswerSet:
        if answers.get(group.gate) is not True:
            return answers

        for source, remote in ((seed, False), (defaults, True)):
            supplied = source.get(group.id, _MISSING)
            if supplied is _MISSING:
                continue
            try:
                items = self._validate_items(group, answers, supplied, remote=remote)
            except ValidationError as exc:
                if not self._interactive:
                    raise
                print_warning(f"Saved entries for '{group.id}' rejected: {exc.message}")
                break
            return answers.with_value(group.id, items)

        if not self._interactive:
            raise ValidationError(group.id, "At least one entry is required")

        collected: list[Mapping[str, Any]] = []
        while len(collected) < group.max_items:
            item_answers = answers
            item: dict[str, Any] = {}
            for member in group.members:
                scoped = item_answers.scoped(member.depends_on, f"{group.id}.{member.id}")
                if member.when is not None and not member.when(scoped):
                    continue
                value = self._prompt_until_valid(member, scoped, self._default(member, scoped))
                item[member.id] = value
                item_answers = item_answers.with_value(member.id, value)
            collected.append(MappingProxyType(item))

            stop = group.continue_question
            stop_scoped = item_answers.scoped(stop.depends_on, f"{group.id}.{stop.id}")
            if not self._prompt_until_valid(stop, stop_scoped, self._default(stop, stop_scoped)):
                break
        else:
            print_warning(f"Reached the limit of {group.max_items} entries for '{group.id}'")

        return answers.with_value(group.id, tuple(collected))

    def _validate_items(
        self,
        group: RepeatGroup,
        answers: AnswerSet,
        supplied: Any,
        *,
        remote: bool,
    ) -> tuple[Mapping[str, Any], ...]:
        if not isinstance(supplied, (list, tuple)):
            raise ValidationError(group.id, "Expected a list of entries")
        if len(supplied) > group.max_items:
            raise ValidationError(group.id, f"At most {group.max_items} entries are allowed")

        items: list[Mapping[str, Any]] = []
        for raw_item in supplied:
            if not isinstance(raw_item, Mapping):
                raise ValidationError(group.id, "Each entry must be an object")
            item_answers = answers
            item: dict[str, Any] = {}
            for member in group.members:
                scoped = item_answers.scoped(member.depends_on, f"{group.id}.{member.id}")
                if member.when is not None and not member.when(scoped):
                    continue
                raw = raw_item.get(member.id, _MISSING)
                if raw is _MISSING:
                    raw = self._default(member, scoped)
                value = self.validate(member, raw, scoped, remote=remote)
                item[member.id] = value
                item_answers = item_answers.with_value(member.id, value)
            items.append(MappingProxyType(item))
        return tuple(items)


def check_value(question: Question, raw: Any, scoped: ScopedAnswers) -> Any:
    """Run the synchronous validation phase and return the transformed value.

    Raises:
        ValidationError: If the built-in or the question's own check fails
    """
    value = _coerce(question, raw)
    if question.transform is not None:
        value = question.transform(value)

    error = _builtin_check(question, value)
    if error is None and question.check is not None:
        error = question.check(value, scoped)
    if error is not None:
        raise ValidationError(question.id, error)
    return value


def _coerce(question: Question, raw: Any) -> Any:
    """Map loosely typed input (prompt strings, JSON) onto the question kind."""
    if question.kind is QuestionKind.BOOLEAN and isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if question.kind is QuestionKind.TEXT:
        if raw is None:
            return ""
        if isinstance(raw, str):
            return raw.strip()
    return raw


def _builtin_check(question: Question, value: Any) -> str | None:
    kind = question.kind
    if kind is QuestionKind.CHOICE and value not in question.choices:
        return f"Must be one of: {', '.join(question.choices)}"
    if kind is QuestionKind.BOOLEAN and not isinstance(value, bool):
        return "Must be yes or no"
    if kind is QuestionKind.LIST and not (
        isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)
    ):
        return "Must be a list of strings"
    return None
