import pytest

from scoresight.core.entities import Student, Subject, SubTopic
from scoresight.services.scoring import (
    ScoreResult, percentage_of, score_for_subject, sub_topic_percentage, total_score_for_student,
)


def test_missing_sub_topic_counts_as_zero_but_keeps_max(physics):
    student = Student.from_scores("S1", "Alice", "c1", {"m": 20})

    result = score_for_subject(student, physics)

    assert result.score == 20
    assert result.max_score == 45
    assert result.percentage == pytest.approx(44.44, abs=0.01)


def test_student_without_any_scores_gets_zero_not_nan(physics):
    student = Student("S1", "Alice", "c1")

    assert score_for_subject(student, physics) == ScoreResult(0.0, 45.0, 0.0)


def test_empty_subject_is_all_zero():
    empty = Subject("none", "Nothing", "NIL")
    student = Student.from_scores("S1", "Alice", "c1", {"m": 20})

    assert score_for_subject(student, empty) == ScoreResult(0.0, 0.0, 0.0)


def test_zero_max_subject_gives_zero_percentage():
    subject = Subject("pe", "PE", "PE", (SubTopic("run", "Running", 0),))
    student = Student.from_scores("S1", "Alice", "c1", {"run": 0})

    result = score_for_subject(student, subject)

    assert result.percentage == 0
    assert result.max_score == 0


def test_out_of_range_scores_are_clamped(physics):
    over = Student.from_scores("S1", "Alice", "c1", {"m": 40, "w": 20})
    under = Student.from_scores("S2", "Bob", "c1", {"m": -5, "w": 10})

    assert score_for_subject(over, physics).percentage == 100
    assert score_for_subject(over, physics).score == 45
    assert score_for_subject(under, physics).score == 10
    assert score_for_subject(under, physics).percentage >= 0


def test_boundary_scores_stay_within_bounds(physics):
    full = Student.from_scores("S1", "Alice", "c1", {"m": 25, "w": 20})
    nothing = Student.from_scores("S2", "Bob", "c1", {"m": 0, "w": 0})

    assert score_for_subject(full, physics).percentage == 100
    assert score_for_subject(nothing, physics).percentage == 0


def test_total_sums_scores_and_max_scores(physics, chemistry):
    student = Student.from_scores("S1", "Alice", "c1", {"m": 20, "w": 10, "org": 15})

    result = total_score_for_student(student, [physics, chemistry])

    assert result.score == 45
    assert result.max_score == 95
    assert result.percentage == pytest.approx(45 / 95 * 100)


def test_total_is_scoped_to_given_subjects(physics, chemistry):
    student = Student.from_scores("S1", "Alice", "c1", {"m": 20, "w": 10, "org": 15})

    assert total_score_for_student(student, [chemistry]).score == 15


def test_total_over_no_subjects_is_zero():
    student = Student.from_scores("S1", "Alice", "c1", {"m": 20})

    assert total_score_for_student(student, []) == ScoreResult(0.0, 0.0, 0.0)


def test_sub_topic_percentage():
    sub_topic = SubTopic("w", "Waves", 20)
    student = Student.from_scores("S1", "Alice", "c1", {"w": 5})

    assert sub_topic_percentage(student, sub_topic) == 25
    assert sub_topic_percentage(Student("S2", "Bob", "c1"), sub_topic) == 0


def test_percentage_of_guards_zero_denominator():
    assert percentage_of(5, 0) == 0
    assert percentage_of(5, 10) == 50


def test_repeated_calls_are_identical(physics):
    student = Student.from_scores("S1", "Alice", "c1", {"m": 17.5, "w": 3})

    assert score_for_subject(student, physics) == score_for_subject(student, physics)
