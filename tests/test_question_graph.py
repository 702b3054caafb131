"""Tests for question graph construction checks and the shipped catalog."""

from __future__ import annotations

import pytest

from npm_generator.core.errors import QuestionGraphError
from npm_generator.core.question_catalog import QUESTION_GRAPH
from npm_generator.core.questions import Question, QuestionGraph, QuestionKind, RepeatGroup


def _text(qid: str, **kwargs: object) -> Question:
    return Question(qid, f"{qid}?", QuestionKind.TEXT, **kwargs)  # type: ignore[arg-type]


class TestQuestionGraphValidation:
    def test_rejects_duplicate_ids(self) -> None:
        with pytest.raises(QuestionGraphError, match="Duplicate question id: a"):
            QuestionGraph([_text("a"), _text("a")])

    def test_rejects_forward_reference(self) -> None:
        with pytest.raises(QuestionGraphError, match="depends on undeclared or later ids: b"):
            QuestionGraph([_text("a", depends_on=frozenset({"b"})), _text("b")])

    def test_rejects_choice_without_choices(self) -> None:
        with pytest.raises(QuestionGraphError, match="has no choices"):
            QuestionGraph([Question("c", "c?", QuestionKind.CHOICE)])

    def test_group_members_may_read_gate_and_earlier_members(self) -> None:
        gate = Question("add", "add?", QuestionKind.BOOLEAN)
        group = RepeatGroup(
            id="items",
            gate="add",
            members=(_text("item_name"), _text("item_version", depends_on=frozenset({"item_name"}))),
            continue_question=Question("more", "more?", QuestionKind.BOOLEAN),
        )
        graph = QuestionGraph([gate, group])
        assert graph.ids == ("add", "items")
        assert graph.dependents_of("add") == ("items",)

    def test_group_termination_must_be_boolean(self) -> None:
        gate = Question("add", "add?", QuestionKind.BOOLEAN)
        group = RepeatGroup(
            id="items",
            gate="add",
            members=(_text("item_name"),),
            continue_question=_text("more"),
        )
        with pytest.raises(QuestionGraphError, match="must be boolean"):
            QuestionGraph([gate, group])

    def test_group_member_cannot_shadow_top_level_id(self) -> None:
        gate = Question("add", "add?", QuestionKind.BOOLEAN)
        group = RepeatGroup(
            id="items",
            gate="add",
            members=(_text("add"),),
            continue_question=Question("more", "more?", QuestionKind.BOOLEAN),
        )
        with pytest.raises(QuestionGraphError, match="Duplicate question id in group"):
            QuestionGraph([gate, group])


class TestCatalog:
    def test_catalog_builds(self) -> None:
        assert QUESTION_GRAPH.ids[0] == "use_new_dir"
        assert QUESTION_GRAPH.ids[-1] == "copyright_year"

    def test_name_reads_publish_target_and_username(self) -> None:
        assert QUESTION_GRAPH.dependencies()["name"] == frozenset({"publish_to", "github_username"})

    def test_dependency_groups_follow_their_gates(self) -> None:
        ids = QUESTION_GRAPH.ids
        assert ids.index("add_dependency") + 1 == ids.index("dependency_list")
        assert ids.index("add_dev_dependency") + 1 == ids.index("dev_dependency_list")

    def test_node_lookup(self) -> None:
        node = QUESTION_GRAPH.node("copyright_year")
        assert isinstance(node, Question)
        assert node.silent is True
        with pytest.raises(KeyError):
            QUESTION_GRAPH.node("missing")
