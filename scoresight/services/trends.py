"""
Score trends across assessments.

The engine does not know about assessments: callers pass one cohort per
assessment, already filtered, each under the label to show on the chart.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..core.entities import Student, Subject, SubTopic
from .scoring import score_for_subject, sub_topic_percentage, total_score_for_student
from .statistics import mean

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendPoint:
    """Cohort percentages for one assessment.

    ``student_percentage`` is None unless a student was asked for, and 0
    when that student has no entry in the assessment's cohort.
    """
    label: str
    average: float
    highest: float
    lowest: float
    count: int
    student_percentage: Optional[float] = None


def scoped_percentage(student: Student, subjects: Sequence[Subject], subject: Optional[Subject] = None,
                      sub_topic: Optional[SubTopic] = None) -> float:
    """A student's percentage on one sub-topic, one subject, or the total, narrowest scope first."""
    if sub_topic is not None:
        return sub_topic_percentage(student, sub_topic)
    if subject is not None:
        return score_for_subject(student, subject).percentage
    return total_score_for_student(student, subjects).percentage


def trend_series(labelled_cohorts: Sequence[Tuple[str, Sequence[Student]]], subjects: Sequence[Subject],
                 subject: Optional[Subject] = None, sub_topic: Optional[SubTopic] = None,
                 student_id: Optional[str] = None) -> List[TrendPoint]:
    """One trend point per labelled cohort, in the order given."""
    points = []
    for label, cohort in labelled_cohorts:
        percentages = [scoped_percentage(student, subjects, subject, sub_topic) for student in cohort]

        student_percentage = None
        if student_id is not None:
            student_percentage = next(
                (value for student, value in zip(cohort, percentages) if student.id == student_id),
                0.0,
            )

        points.append(TrendPoint(
            label=label,
            average=mean(percentages),
            highest=max(percentages, default=0.0),
            lowest=min(percentages, default=0.0),
            count=len(percentages),
            student_percentage=student_percentage,
        ))
    logger.debug("Trend series over %d assessments", len(points))
    return points
