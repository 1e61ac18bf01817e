from __future__ import annotations

import pytest

from gats_iqtest.core.answers import AnswerSet
from gats_iqtest.core.exceptions import UnknownQuestionError
from gats_iqtest.models.schemas import Answer


def test_last_non_empty_upsert_wins():
    answers = AnswerSet()
    for text in ["3", "4", "5"]:
        answers.upsert("q1", text)
    assert answers.lookup("q1") == "5"
    assert len(answers) == 1


@pytest.mark.parametrize("blank", ["", "   ", "\n"])
def test_blank_input_never_changes_lookup(blank):
    answers = AnswerSet()
    assert answers.upsert("q1", blank) is False
    assert answers.lookup("q1") is None
    assert "q1" not in answers

    answers.upsert("q1", "4")
    assert answers.upsert("q1", blank) is False
    assert answers.lookup("q1") == "4"


def test_overwrite_keeps_relative_order():
    answers = AnswerSet()
    answers.upsert("q1", "a")
    answers.upsert("q2", "b")
    answers.upsert("q3", "c")
    answers.upsert("q1", "changed")

    assert list(answers) == ["q1", "q2", "q3"]
    assert [(a.question_id, a.answer) for a in answers.as_answers()] == [
        ("q1", "changed"),
        ("q2", "b"),
        ("q3", "c"),
    ]


def test_interleaved_sequence_matches_last_write_per_question():
    answers = AnswerSet()
    sequence = [("q1", "x"), ("q2", ""), ("q2", "y"), ("q1", ""), ("q3", "z"), ("q2", "w")]
    expected = {}
    for qid, text in sequence:
        answers.upsert(qid, text)
        if text:
            expected[qid] = text

    for qid in ["q1", "q2", "q3", "q4"]:
        assert answers.lookup(qid) == expected.get(qid)


def test_clear_empties_the_set():
    answers = AnswerSet()
    answers.upsert("q1", "a")
    answers.clear()
    assert len(answers) == 0
    assert answers.lookup("q1") is None


def test_from_answers_folds_in_order():
    submitted = [Answer(question_id="q1", answer="3"), Answer(question_id="q2", answer="7"),
                 Answer(question_id="q1", answer="4"), Answer(question_id="q2", answer=" ")]

    answers = AnswerSet.from_answers(submitted, known_ids={"q1", "q2"})

    assert [(a.question_id, a.answer) for a in answers.as_answers()] == [("q1", "4"), ("q2", "7")]


def test_from_answers_rejects_unknown_ids():
    with pytest.raises(UnknownQuestionError):
        AnswerSet.from_answers([Answer(question_id="zzz", answer="x")], known_ids={"q1"})
    assert len(AnswerSet.from_answers([Answer(question_id="zzz", answer="x")])) == 1
