from __future__ import annotations

import pytest

from course_quiz.quiz import models
from course_quiz.quiz.models import (
    Course,
    Identity,
    Question,
    build_commit,
    filter_questions,
    parse_question,
    score_band,
    score_percentage,
)

from fixtures.quiz import question_record


def test_parse_question_accepts_valid_record():
    question = parse_question(question_record("Q?", correct=3, id="abc"))

    assert question == Question(
        id="abc",
        prompt="Q?",
        options=("alpha", "beta", "gamma", "delta"),
        correct_answer=3,
        explanation="Because.",
    )


@pytest.mark.parametrize(
    "record",
    [
        question_record(options=["a", "b", "c"]),
        question_record(options=["a", "b", "c", "d", "e"]),
        {**question_record(), "options": "abcd"},
        question_record(options=["a", None, "c", "d"]),
        question_record(options=[1, 2, 3, 4]),
        {**question_record(), "options": None},
        question_record(correct=4),
        question_record(correct=-1),
        question_record(correct="1"),
        question_record(correct=True),
        question_record(correct=None),
        question_record(prompt=""),
        question_record(prompt="   "),
        {"options": ["a", "b", "c", "d"], "correct_answer": 0},
        "not a mapping",
    ],
)
def test_parse_question_rejects_invalid_records(record):
    assert parse_question(record) is None


def test_parse_question_defaults_missing_explanation():
    question = parse_question(question_record(explanation=None))

    assert question is not None
    assert question.explanation == models.DEFAULT_EXPLANATION


def test_parse_question_uses_fallback_id():
    question = parse_question(question_record(), fallback_id="7")

    assert question is not None
    assert question.id == "7"


def test_filter_questions_keeps_valid_records_in_order():
    raw = [
        question_record("first", correct=0),
        question_record("bad", options=["a", "b", "c"]),
        question_record("second", correct=2),
        question_record("worse", correct=4),
        question_record("third", correct=1),
    ]

    questions = filter_questions(raw)

    assert [q.prompt for q in questions] == ["first", "second", "third"]
    assert [q.correct_answer for q in questions] == [0, 2, 1]


def test_filter_questions_is_idempotent():
    raw = [question_record("one"), question_record("two", correct=5)]

    once = filter_questions(raw)
    twice = filter_questions(once)

    assert twice == once


def test_filter_questions_empty_input():
    assert filter_questions([]) == []


def test_filter_questions_gives_unique_ids():
    raw = [
        question_record("a", id="2"),
        question_record("b"),
        question_record("c", id="2"),
        question_record("d", id="2-2"),
    ]

    ids = [question.id for question in filter_questions(raw)]

    assert ids == ["2", "2-2", "2-3", "2-2-2"]
    assert len(set(ids)) == len(ids)
    assert [q.id for q in filter_questions(filter_questions(raw))] == ids


def test_parse_question_blank_id_uses_generated_fallback():
    first = parse_question(question_record(id=None))
    second = parse_question(question_record(id=""))

    assert first is not None and second is not None
    assert first.id and second.id
    assert first.id != second.id


@pytest.mark.parametrize(
    ("correct", "total", "expected"),
    [
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 67),
        (3, 3, 100),
        (1, 2, 50),
        (1, 8, 13),
        (5, 8, 63),
        (0, 1, 0),
        (1, 1, 100),
    ],
)
def test_score_percentage_rounds_half_up(correct, total, expected):
    assert score_percentage(correct, total) == expected


def test_score_percentage_requires_questions():
    with pytest.raises(ValueError):
        score_percentage(0, 0)


def test_build_commit_derives_points_and_percentage():
    questions = filter_questions(
        [
            question_record(correct=0),
            question_record(correct=1),
            question_record(correct=2),
        ]
    )

    commit = build_commit(questions, [0, 1, 3])

    assert commit.correct_count == 2
    assert commit.question_count == 3
    assert commit.score_percentage == 67
    assert commit.points_earned == 20


def test_build_commit_honours_points_per_correct():
    questions = filter_questions([question_record(correct=1)])

    commit = build_commit(questions, [1], points_per_correct=25)

    assert commit.points_earned == 25


@pytest.mark.parametrize(
    ("percentage", "band"),
    [(100, "good"), (80, "good"), (79, "fair"), (60, "fair"), (59, "poor")],
)
def test_score_band_thresholds(percentage, band):
    assert score_band(percentage) == band


def test_course_from_record_clamps_progress():
    course = Course.from_record(
        {"id": 5, "user_id": "u", "title": "T", "progress": 150}
    )

    assert course.id == "5"
    assert course.progress == 100
    assert Course.from_record({"id": "x", "progress": "bad"}).progress == 0


def test_identity_guest_detection():
    assert Identity.guest().is_guest
    assert Identity("").is_guest
    assert not Identity("user-1").is_guest


def test_question_to_record_round_trips_through_parser():
    question = Question("9", "Q?", ("a", "b", "c", "d"), 2, "why")

    assert parse_question(question.to_record()) == question
