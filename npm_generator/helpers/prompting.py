"""Prompt renderers used by the question resolver."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import click

from npm_generator.core.answers import is_secret
from npm_generator.core.questions import Question, QuestionKind


class Prompter(Protocol):
    """Collects a single value for a single question."""

    def ask(self, question: Question, default: Any) -> Any:
        """Return the raw value the user entered for ``question``."""
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question outside the question graph."""
        ...


class ConsolePrompter:
    """Terminal prompts rendered with click."""

    def ask(self, question: Question, default: Any) -> Any:
        if question.kind is QuestionKind.BOOLEAN:
            return click.confirm(question.prompt, default=bool(default))

        if question.kind is QuestionKind.CHOICE:
            return click.prompt(
                question.prompt,
                type=click.Choice(list(question.choices)),
                default=default if default in question.choices else None,
                show_choices=True,
            )

        if question.kind is QuestionKind.LIST and isinstance(default, (list, tuple)):
            default = ", ".join(str(item) for item in default)
        elif isinstance(default, Mapping):
            default = ", ".join(f"{key}:{value}" for key, value in default.items())

        secret = is_secret(question.id)
        return click.prompt(
            question.prompt,
            default="" if default is None else str(default),
            show_default=not secret and default not in (None, ""),
            hide_input=secret,
        )

    def confirm(self, message: str, default: bool = True) -> bool:
        return click.confirm(message, default=default)
