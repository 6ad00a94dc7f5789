import pytest

from scoresight.core.entities import Student
from scoresight.services.trends import TrendPoint, scoped_percentage, trend_series


@pytest.fixture
def assessments(make_cohort):
    return [
        ("Midterm", make_cohort([40, 60, 80])),
        ("Final", make_cohort([70, 90])),
    ]


def test_one_point_per_assessment_in_given_order(assessments, single_topic):
    points = trend_series(assessments, [single_topic])

    assert [point.label for point in points] == ["Midterm", "Final"]
    assert points[0] == TrendPoint("Midterm", average=60, highest=80, lowest=40, count=3)
    assert points[1].average == 80
    assert points[1].count == 2


def test_student_percentage_follows_one_student(assessments, single_topic):
    points = trend_series(assessments, [single_topic], student_id="S2")

    assert [point.student_percentage for point in points] == [60, 90]


def test_absent_student_reads_zero(assessments, single_topic):
    points = trend_series(assessments, [single_topic], student_id="S3")

    assert [point.student_percentage for point in points] == [80, 0]


def test_student_percentage_is_none_when_not_asked(assessments, single_topic):
    assert all(point.student_percentage is None for point in trend_series(assessments, [single_topic]))


def test_empty_assessment_is_all_zero(single_topic):
    point, = trend_series([("Quiz", [])], [single_topic], student_id="S1")

    assert point == TrendPoint("Quiz", 0, 0, 0, 0, 0)


def test_no_assessments_gives_no_points(single_topic):
    assert trend_series([], [single_topic]) == []


def test_scope_narrows_from_total_to_subject_to_sub_topic(physics, chemistry):
    student = Student.from_scores("S1", "A", "c1", {"m": 25, "w": 0, "org": 30, "inorg": 20})
    subjects = [physics, chemistry]

    assert scoped_percentage(student, subjects) == pytest.approx(75 / 95 * 100)
    assert scoped_percentage(student, subjects, subject=physics) == pytest.approx(25 / 45 * 100)
    assert scoped_percentage(student, subjects, subject=physics, sub_topic=physics.get_sub_topic("w")) == 0


def test_subject_trend_counts_missing_scores_as_zero(physics):
    cohort = [
        Student.from_scores("S1", "A", "c1", {"m": 25, "w": 20}),
        Student.from_scores("S2", "B", "c1", {}),
    ]

    point, = trend_series([("Midterm", cohort)], [physics], subject=physics)

    assert (point.average, point.highest, point.lowest) == (50, 100, 0)
