import pytest

from scoresight.core.entities import Student
from scoresight.core.exceptions import InvalidInputError
from scoresight.services.statistics import (
    CohortStatistics, Quartiles,
    box_plot, box_plots_by_class, class_statistics, cohort_stats, mean, median, population_stddev, quartiles,
)


def test_even_count_quartiles():
    result = quartiles([10, 20, 30, 40, 50, 60, 70, 80])

    assert result == Quartiles(q1=25, median=45, q3=65)


def test_odd_count_excludes_median_from_halves():
    result = quartiles([10, 20, 30, 40, 50])

    assert result == Quartiles(q1=15, median=30, q3=45)


def test_quartiles_sort_their_input():
    assert quartiles([50, 10, 40, 20, 30]) == quartiles([10, 20, 30, 40, 50])


def test_median_of_empty_is_zero():
    assert median([]) == 0


def test_empty_cohort_is_all_zero():
    stats = cohort_stats([])

    assert stats == CohortStatistics()
    assert stats.mean == 0
    assert stats.stddev == 0
    assert stats.quartiles == Quartiles(0, 0, 0)
    assert stats.min == 0 and stats.max == 0
    assert stats.count == 0


def test_population_stddev_divides_by_n():
    values = [2, 4, 4, 4, 5, 5, 7, 9]

    assert mean(values) == 5
    assert population_stddev(values) == pytest.approx(2.0)


def test_outliers_are_excluded_from_whiskers():
    stats = cohort_stats([58, 10, 50, 52, 54, 56])

    assert stats.quartiles == Quartiles(q1=50, median=53, q3=56)
    assert stats.outliers == (10,)
    assert stats.min == 50
    assert stats.max == 58
    assert stats.count == 6


def test_whiskers_fall_back_to_extremes_when_everything_is_an_outlier():
    # one value: both halves are empty, so q1 = q3 = 0 and 70 lies outside [0, 0]
    stats = cohort_stats([70])

    assert stats.quartiles == Quartiles(q1=0, median=70, q3=0)
    assert stats.outliers == (70,)
    assert stats.min == 70
    assert stats.max == 70
    assert stats.mean == 70
    assert stats.stddev == 0


def test_iqr_multiplier_is_configurable():
    assert cohort_stats([10, 50, 52, 54, 56, 58], iqr_multiplier=10).outliers == ()


def test_class_statistics_report_raw_extremes(single_topic, make_cohort):
    stats = class_statistics(make_cohort([90, 70, 40]), [single_topic])

    assert stats.total_students == 3
    assert stats.average == pytest.approx(200 / 3)
    assert stats.highest == 90
    assert stats.lowest == 40


def test_class_statistics_of_empty_cohort(single_topic):
    stats = class_statistics([], [single_topic])

    assert stats.total_students == 0
    assert stats.average == 0


def test_box_plot_for_one_subject(physics, chemistry):
    cohort = [
        Student.from_scores("S1", "A", "c1", {"m": 25, "w": 20, "org": 0}),
        Student.from_scores("S2", "B", "c1", {"m": 0, "w": 0, "org": 30, "inorg": 20}),
    ]

    assert box_plot(cohort, [physics, chemistry], physics).quartiles.median == 50
    assert box_plot(cohort, [physics, chemistry]).mean == pytest.approx((45 / 95 + 50 / 95) * 50)


def test_box_plots_by_class_keep_class_order(single_topic, classes, make_cohort):
    students = make_cohort([90, 70], class_id="c1")

    plots = box_plots_by_class(students, classes, [single_topic])

    assert [plot.class_id for plot in plots] == ["c1", "c2"]
    assert plots[0].statistics.mean == 80
    assert plots[1].statistics == CohortStatistics()


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_percentages_are_rejected(bad):
    with pytest.raises(InvalidInputError) as excinfo:
        cohort_stats([50.0, bad])

    assert excinfo.value.error_code == "not_finite"
