import pytest

from scoresight.config import AnalyticsConfig
from scoresight.core.entities import Student, Subject, SubTopic
from scoresight.core.enums import GapPriority
from scoresight.core.exceptions import InvalidInputError
from scoresight.services import AnalyticsService


@pytest.fixture
def service(subjects):
    return AnalyticsService(subjects)


@pytest.fixture
def cohort():
    return [
        Student.from_scores("S1", "Alice", "c1", {"m": 25, "w": 20, "org": 27, "inorg": 18}),
        Student.from_scores("S2", "Bob", "c1", {"m": 15, "w": 10, "org": 15, "inorg": 10}),
        Student.from_scores("S3", "Carol", "c2", {"m": 5, "w": 3, "org": 9, "inorg": 8}),
    ]


def test_catalog_rejects_duplicate_subject_codes(physics):
    twin = Subject("physics-2", "Physics II", "PHY", (SubTopic("x", "X", 10),))

    with pytest.raises(InvalidInputError) as excinfo:
        AnalyticsService([physics, twin])

    assert excinfo.value.error_code == "duplicate_subject_code"


def test_catalog_rejects_sub_topic_shared_between_subjects(physics):
    other = Subject("other", "Other", "OTH", (SubTopic("m", "Mechanics again", 10),))

    with pytest.raises(InvalidInputError) as excinfo:
        AnalyticsService([physics, other])

    assert excinfo.value.error_code == "duplicate_sub_topic"


def test_unknown_sub_topic_fails_the_whole_call(service, cohort):
    stray = Student.from_scores("S9", "Mallory", "c1", {"bio-cell": 12})

    with pytest.raises(InvalidInputError) as excinfo:
        service.gap_report(cohort + [stray])

    assert excinfo.value.error_code == "unknown_sub_topic"
    assert excinfo.value.details == {"student_id": "S9", "sub_topic_ids": ["bio-cell"]}


def test_duplicate_student_is_rejected(service, cohort):
    with pytest.raises(InvalidInputError) as excinfo:
        service.top_students(cohort + [cohort[0]])

    assert excinfo.value.error_code == "duplicate_student"


def test_rejection_is_logged(service, caplog):
    stray = Student.from_scores("S9", "Mallory", "c1", {"nope": 1})

    with pytest.raises(InvalidInputError):
        service.validate_cohort([stray])

    assert "unknown sub-topics" in caplog.text


def test_empty_cohort_is_not_an_error(service):
    summary = service.dashboard_summary([])

    assert summary.statistics.total_students == 0
    assert summary.top_students == []
    assert summary.needing_attention == 0
    assert all(gap.priority is GapPriority.URGENT for gap in summary.weakest_topics)


def test_scores_and_rank(service, cohort, physics):
    assert service.subject_score(cohort[0], physics).percentage == 100
    assert service.total_score(cohort[2]).score == 25
    assert service.total_score(cohort[2]).max_score == 95
    assert service.rank(cohort[1], cohort).rank == 2


def test_dashboard_summary(service, cohort):
    summary = service.dashboard_summary(cohort, weakest_limit=2)

    assert summary.statistics.total_students == 3
    assert [entry.student.id for entry in summary.top_students] == ["S1"]
    assert [entry.student.id for entry in summary.bottom_students] == ["S3"]
    assert summary.needing_attention == 1
    assert list(summary.subject_averages) == ["PHY", "CHE"]
    assert len(summary.weakest_topics) == 2
    averages = [gap.average_percentage for gap in summary.weakest_topics]
    assert averages == sorted(averages)


def test_config_drives_fractions_and_thresholds(subjects, cohort):
    service = AnalyticsService(subjects, AnalyticsConfig(top_fraction=0.5, bottom_fraction=0.5,
                                                         attention_threshold=70))

    assert [entry.student.id for entry in service.top_students(cohort)] == ["S1", "S2"]
    assert [entry.student.id for entry in service.bottom_students(cohort)] == ["S3", "S2"]
    assert service.needing_attention(cohort) == 2
    assert service.needing_attention(cohort, fraction=0.1) == 1


def test_student_report(service, cohort):
    report = service.student_report(cohort[1], cohort[:2])

    assert report.student_id == "S2"
    assert report.total.percentage == pytest.approx(50 / 95 * 100)
    assert set(report.subject_scores) == {"PHY", "CHE"}
    assert report.rank.rank == 2
    assert report.rank.percentile == 0
    assert report.strengths == []
    assert report.skill_profile.gap_to_top > 0


def test_student_report_lists_weaknesses(service, cohort):
    report = service.student_report(cohort[2], cohort)

    assert [topic.sub_topic_id for topic in report.weaknesses] == ["w", "m", "org", "inorg"]
    assert report.weaknesses[0].recommendation == "Review Physics - Waves"


def test_class_report(service, cohort, classes):
    report = service.class_report(cohort, classes)

    assert [row.class_id for row in report.comparison] == ["c1", "c2"]
    assert [row.student_count for row in report.comparison] == [2, 1]
    assert [plot.class_name for plot in report.box_plots] == ["M.6/1", "M.6/2"]
    assert report.box_plots[1].statistics.count == 1


def test_box_plot_and_radar(service, cohort, physics):
    assert service.box_plot(cohort, physics).count == 3

    points = service.radar_series(cohort[:1], cohort)

    assert [point.subject_code for point in points] == ["PHY", "CHE"]
    assert points[0].series_a == 100


def test_get_subject(service, physics):
    assert service.get_subject("physics") == physics
    assert service.get_subject("art") is None


def test_out_of_range_score_is_warned_once_per_call(service, cohort, caplog):
    over = Student.from_scores("S4", "Dan", "c1", {"m": 40, "w": 20})

    summary = service.dashboard_summary(cohort + [over])

    clamp_warnings = [record for record in caplog.records
                      if record.levelname == "WARNING" and "clamped" in record.getMessage()]
    assert len(clamp_warnings) == 1
    assert "S4" in clamp_warnings[0].getMessage()
    assert summary.subject_averages["PHY"] <= 100


def test_trend_validates_every_assessment(service, cohort):
    stray = Student.from_scores("S9", "Mallory", "c1", {"bio-cell": 12})

    with pytest.raises(InvalidInputError):
        service.trend([("Midterm", cohort), ("Final", [stray])])


def test_trend_over_one_sub_topic(service, cohort):
    points = service.trend([("Midterm", cohort)], sub_topic=service.get_sub_topic("m"), student_id="S2")

    assert points[0].highest == 100
    assert points[0].lowest == pytest.approx(20)
    assert points[0].student_percentage == pytest.approx(60)
    assert service.get_sub_topic("nope") is None
