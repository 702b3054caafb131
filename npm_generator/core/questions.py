"""Question graph primitives.

A ``Question`` declares every answer it reads in ``depends_on``; the
``QuestionGraph`` rejects forward and unknown references when it is built,
and the resolver hands each callable a view restricted to those ids.

Example:
    >>> graph = QuestionGraph([
    ...     Question("name", "Package name:", QuestionKind.TEXT),
    ...     Question(
    ...         "repo",
    ...         "Repository name:",
    ...         QuestionKind.TEXT,
    ...         depends_on=frozenset({"name"}),
    ...         default_from=lambda a: a["name"],
    ...     ),
    ... ])
    >>> graph.dependencies()["repo"]
    frozenset({'name'})
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from .errors import QuestionGraphError

if TYPE_CHECKING:
    from npm_generator.helpers.collaborators import Collaborators

    from .answers import ScopedAnswers


class QuestionKind(Enum):
    """Answer types a question can collect."""
    CHOICE = "choice"
    TEXT = "text"
    LIST = "list"
    BOOLEAN = "boolean"


Predicate = Callable[["ScopedAnswers"], bool]
DefaultResolver = Callable[["ScopedAnswers"], Any]
SyncCheck = Callable[[Any, "ScopedAnswers"], Union[str, None]]
RemoteCheck = Callable[[Any, "ScopedAnswers", "Collaborators"], Union[str, None]]
Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class Question:
    """One node of the question graph.

    Attributes:
        id: Answer id the resolved value is stored under
        prompt: Text shown by the prompt renderer
        kind: Answer type
        choices: Allowed values for CHOICE questions
        default: Constant default
        default_from: Default derived from prior answers (wins over default)
        when: Applicability predicate; None means always asked
        depends_on: Every prior answer id read by default_from/when/checks
        check: Synchronous validator returning an error message or None
        remote_check: Validator that consults an external collaborator
        transform: Normalizer applied before validation
        silent: Resolved from seed/default only, never prompted
    """
    id: str
    prompt: str
    kind: QuestionKind
    choices: tuple[str, ...] = ()
    default: Any = None
    default_from: DefaultResolver | None = None
    when: Predicate | None = None
    depends_on: frozenset[str] = field(default_factory=frozenset)
    check: SyncCheck | None = None
    remote_check: RemoteCheck | None = None
    transform: Transform | None = None
    silent: bool = False


@dataclass(frozen=True)
class RepeatGroup:
    """Bounded accumulation loop ("add another X?").

    The group runs only when its ``gate`` answer is True. Each iteration
    resolves ``members`` into one item mapping, then asks
    ``continue_question``; the loop ends when that answer is False or
    ``max_items`` items were collected.
    """
    id: str
    gate: str
    members: tuple[Question, ...]
    continue_question: Question
    max_items: int = 20

    @property
    def depends_on(self) -> frozenset[str]:
        return frozenset({self.gate})


Node = Union[Question, RepeatGroup]


class QuestionGraph(Sequence[Node]):
    """Ordered, statically checked collection of questions and groups."""

    def __init__(self, nodes: Sequence[Node]) -> None:
        self._nodes: tuple[Node, ...] = tuple(nodes)
        self._by_id: dict[str, Node] = {}
        self._validate()

    def _validate(self) -> None:
        declared: set[str] = set()
        for node in self._nodes:
            if node.id in declared:
                raise QuestionGraphError(f"Duplicate question id: {node.id}")
            unknown = sorted(node.depends_on - declared)
            if unknown:
                raise QuestionGraphError(
                    f"Question '{node.id}' depends on undeclared or later ids: "
                    + ", ".join(unknown)
                )
            if isinstance(node, Question) and node.kind is QuestionKind.CHOICE and not node.choices:
                raise QuestionGraphError(f"Choice question '{node.id}' has no choices")
            if isinstance(node, RepeatGroup):
                self._validate_group(node, declared)
            declared.add(node.id)
            self._by_id[node.id] = node

    @staticmethod
    def _validate_group(group: RepeatGroup, declared: set[str]) -> None:
        gate = group.gate
        local: set[str] = set()
        for member in (*group.members, group.continue_question):
            if member.id in declared or member.id in local or member.id == group.id:
                raise QuestionGraphError(
                    f"Duplicate question id in group '{group.id}': {member.id}"
                )
            visible = declared | local | {gate}
            unknown = sorted(member.depends_on - visible)
            if unknown:
                raise QuestionGraphError(
                    f"Question '{group.id}.{member.id}' depends on undeclared or later ids: "
                    + ", ".join(unknown)
                )
            local.add(member.id)
        if group.continue_question.kind is not QuestionKind.BOOLEAN:
            raise QuestionGraphError(
                f"Group '{group.id}' termination question must be boolean"
            )

    def __getitem__(self, index: int) -> Node:  # type: ignore[override]
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(node.id for node in self._nodes)

    def node(self, node_id: str) -> Node:
        """Return the node with ``node_id``.

        Raises:
            KeyError: If no such node exists
        """
        return self._by_id[node_id]

    def dependencies(self) -> Mapping[str, frozenset[str]]:
        """Return the dependency edges keyed by node id."""
        return {node.id: node.depends_on for node in self._nodes}

    def dependents_of(self, node_id: str) -> tuple[str, ...]:
        """Return ids of nodes that read ``node_id``."""
        return tuple(node.id for node in self._nodes if node_id in node.depends_on)
