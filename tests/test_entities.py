import pytest

from scoresight.core.entities import (
    ClassGroup, ExamProgram, ScoreEntry, Student, Subject, SubTopic, members_of_class, to_dict,
)
from scoresight.core.enums import GapPriority
from scoresight.core.exceptions import InvalidInputError, ScoresightException
from scoresight.services.gap_analysis import sub_topic_gap


def test_negative_max_score_is_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        SubTopic("m", "Mechanics", -5)

    assert excinfo.value.error_code == "negative_max_score"
    assert excinfo.value.details["sub_topic_id"] == "m"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "ten", None])
def test_scores_must_be_finite_numbers(value):
    with pytest.raises(InvalidInputError):
        ScoreEntry("m", value)


def test_numeric_strings_are_accepted():
    assert ScoreEntry("m", "12.5").score == 12.5


def test_subject_max_score_is_sum_of_sub_topics(physics):
    assert physics.max_score == 45
    assert physics.sub_topic_ids == ("m", "w")
    assert physics.get_sub_topic("w").name == "Waves"
    assert physics.get_sub_topic("missing") is None


def test_subject_without_sub_topics_has_zero_max():
    assert Subject("empty", "Empty", "EMP").max_score == 0


def test_duplicate_sub_topic_in_subject_is_rejected():
    with pytest.raises(InvalidInputError):
        Subject("s", "S", "S", [SubTopic("a", "A", 10), SubTopic("a", "A again", 5)])


def test_subject_sub_topics_are_stored_as_tuple():
    subject = Subject("s", "S", "S", [SubTopic("a", "A", 10)])

    assert isinstance(subject.sub_topics, tuple)


def test_duplicate_score_entry_is_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        Student("S1", "A", "c1", (ScoreEntry("m", 1), ScoreEntry("m", 2)))

    assert excinfo.value.error_code == "duplicate_score_entry"


def test_student_score_lookup():
    student = Student.from_scores("S1", "A", "c1", {"m": 20, "w": 3})

    assert student.score_for("m") == 20
    assert student.score_for("org") is None
    assert student.sub_topic_ids == ("m", "w")


def test_students_compare_by_value():
    assert Student.from_scores("S1", "A", "c1", {"m": 1}) == Student.from_scores("S1", "A", "c1", {"m": 1})


def test_members_of_class_keeps_order():
    students = [
        Student("S1", "A", "c1"),
        Student("S2", "B", "c2"),
        Student("S3", "C", "c1"),
    ]

    assert [student.id for student in members_of_class(students, "c1")] == ["S1", "S3"]
    assert members_of_class(students, "c9") == ()


def test_exam_program_lookup(physics, chemistry):
    program = ExamProgram("pal", "Pre-A-Level", [physics, chemistry])

    assert program.get_subject("chemistry") is chemistry
    assert program.get_subject("biology") is None


def test_to_dict_skips_private_fields_and_flattens_enums(physics):
    student = Student.from_scores("S1", "A", "c1", {"m": 20})

    assert to_dict(student) == {
        "id": "S1",
        "name": "A",
        "class_id": "c1",
        "scores": [{"sub_topic_id": "m", "score": 20.0}],
    }
    gap = to_dict(sub_topic_gap(physics.get_sub_topic("w"), [student], physics))
    assert gap["priority"] == GapPriority.URGENT.value
    assert to_dict(ClassGroup("c1", "M.6/1"))["program"] == ""


def test_to_dict_rejects_non_dataclasses():
    with pytest.raises(TypeError):
        to_dict({"id": "S1"})


def test_exception_carries_code_and_details():
    error = InvalidInputError("bad", error_code="bad_input", details={"field": "x"})

    assert isinstance(error, ScoresightException)
    assert str(error) == "bad"
    assert error.details == {"field": "x"}
