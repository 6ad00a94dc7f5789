"""
Cohort statistics: mean, population standard deviation, quartiles and
box-plot whiskers with IQR outlier detection.

Standard deviation is the population form (divide by N, not N - 1); the
dashboards have always reported it that way.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..core.entities import ClassGroup, Student, Subject, members_of_class
from ..core.enums import DEFAULT_IQR_MULTIPLIER
from ..core.exceptions import InvalidInputError
from .scoring import score_for_subject, total_score_for_student

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quartiles:
    q1: float = 0.0
    median: float = 0.0
    q3: float = 0.0


@dataclass(frozen=True)
class CohortStatistics:
    """Summary of a cohort's percentages.

    ``min`` and ``max`` are the box-plot whisker ends: the extremes of the
    values that are not outliers.
    """
    mean: float = 0.0
    stddev: float = 0.0
    quartiles: Quartiles = field(default_factory=Quartiles)
    min: float = 0.0
    max: float = 0.0
    outliers: Tuple[float, ...] = ()
    count: int = 0


@dataclass(frozen=True)
class ClassStatistics:
    """Headline numbers for a class dashboard, over total percentages."""
    total_students: int = 0
    average: float = 0.0
    highest: float = 0.0
    lowest: float = 0.0
    stddev: float = 0.0


@dataclass(frozen=True)
class LabelledBoxPlot:
    class_id: str
    class_name: str
    statistics: CohortStatistics


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def population_stddev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    average = mean(values)
    return math.sqrt(math.fsum((value - average) ** 2 for value in values) / len(values))


def median(sorted_values: Sequence[float]) -> float:
    """Median of already sorted values; 0 for an empty sequence."""
    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n % 2 == 0:
        return (sorted_values[n // 2 - 1] + sorted_values[n // 2]) / 2
    return sorted_values[n // 2]


def quartiles(values: Sequence[float]) -> Quartiles:
    """Compute quartiles by the median-of-halves method.

    With an odd count the median itself belongs to neither half.
    """
    ordered = sorted(values)
    n = len(ordered)
    lower_half = ordered[:n // 2]
    upper_half = ordered[n // 2:] if n % 2 == 0 else ordered[n // 2 + 1:]
    return Quartiles(q1=median(lower_half), median=median(ordered), q3=median(upper_half))


def cohort_stats(percentages: Sequence[float],
                 iqr_multiplier: float = DEFAULT_IQR_MULTIPLIER) -> CohortStatistics:
    """Compute mean, stddev, quartiles and whiskers for a cohort's percentages."""
    values = list(percentages)
    non_finite = [value for value in values if not math.isfinite(value)]
    if non_finite:
        raise InvalidInputError(
            f"Percentages must be finite, got {non_finite!r}",
            error_code="not_finite",
            details={"count": len(non_finite)},
        )
    if not values:
        return CohortStatistics()

    ordered = sorted(values)
    quarts = quartiles(ordered)
    iqr = quarts.q3 - quarts.q1
    lower_bound = quarts.q1 - iqr_multiplier * iqr
    upper_bound = quarts.q3 + iqr_multiplier * iqr

    outliers = tuple(value for value in ordered if value < lower_bound or value > upper_bound)
    inliers = [value for value in ordered if lower_bound <= value <= upper_bound]
    whisker_low = inliers[0] if inliers else ordered[0]
    whisker_high = inliers[-1] if inliers else ordered[-1]

    return CohortStatistics(
        mean=mean(values),
        stddev=population_stddev(values),
        quartiles=quarts,
        min=whisker_low,
        max=whisker_high,
        outliers=outliers,
        count=len(values),
    )


def cohort_percentages(cohort: Sequence[Student], subjects: Sequence[Subject],
                       subject: Optional[Subject] = None) -> List[float]:
    """Per-student percentages, either of one subject or of the total."""
    if subject is not None:
        return [score_for_subject(student, subject).percentage for student in cohort]
    return [total_score_for_student(student, subjects).percentage for student in cohort]


def class_statistics(cohort: Sequence[Student], subjects: Sequence[Subject]) -> ClassStatistics:
    """Average, raw extremes and stddev of total percentages."""
    percentages = cohort_percentages(cohort, subjects)
    if not percentages:
        return ClassStatistics()
    return ClassStatistics(
        total_students=len(percentages),
        average=mean(percentages),
        highest=max(percentages),
        lowest=min(percentages),
        stddev=population_stddev(percentages),
    )


def box_plot(cohort: Sequence[Student], subjects: Sequence[Subject],
             subject: Optional[Subject] = None,
             iqr_multiplier: float = DEFAULT_IQR_MULTIPLIER) -> CohortStatistics:
    """Box-plot statistics over total percentages, or one subject's when given."""
    return cohort_stats(cohort_percentages(cohort, subjects, subject), iqr_multiplier)


def box_plots_by_class(students: Sequence[Student], classes: Sequence[ClassGroup],
                       subjects: Sequence[Subject], subject: Optional[Subject] = None,
                       iqr_multiplier: float = DEFAULT_IQR_MULTIPLIER) -> List[LabelledBoxPlot]:
    """One box plot per class, in class order. Empty classes get all-zero statistics."""
    plots = []
    for class_group in classes:
        members = members_of_class(students, class_group.id)
        logger.debug("Box plot for class %s over %d students", class_group.id, len(members))
        plots.append(LabelledBoxPlot(
            class_id=class_group.id,
            class_name=class_group.name,
            statistics=box_plot(members, subjects, subject, iqr_multiplier),
        ))
    return plots
