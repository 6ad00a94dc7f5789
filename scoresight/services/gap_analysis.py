"""
Gap analysis: classifies sub-topics by how far the cohort average falls
below mastery, and the per-student and heatmap views built on the same
sub-topic percentages.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.entities import Student, Subject, SubTopic
from ..core.enums import (
    GapPriority, MasteryLevel, PerformanceBand,
    DEFAULT_ATTENTION_THRESHOLD, DEFAULT_MODERATE_BELOW, DEFAULT_STRENGTH_THRESHOLD, DEFAULT_URGENT_BELOW,
)
from .scoring import clamped_score, sub_topic_percentage
from .statistics import mean

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubTopicGap:
    sub_topic_id: str
    name: str
    subject_code: str
    subject_name: str
    max_score: float
    average_percentage: float
    highest_percentage: float
    lowest_percentage: float
    priority: GapPriority


@dataclass(frozen=True)
class TopicResult:
    """One sub-topic result of a single student."""
    sub_topic_id: str
    name: str
    subject_code: str
    subject_name: str
    score: float
    max_score: float
    percentage: float
    recommendation: str = ""


@dataclass(frozen=True)
class MasteryHeatmap:
    """Student x sub-topic percentage matrix.

    ``rows`` follows cohort order and ``columns`` follows catalog order;
    ``cells[i][j]`` is the percentage of student ``rows[i]`` on sub-topic
    ``columns[j]``.
    """
    columns: Tuple[str, ...]
    rows: Tuple[str, ...]
    cells: Tuple[Tuple[float, ...], ...]
    row_averages: Tuple[float, ...]
    column_averages: Tuple[float, ...]
    problem_columns: Tuple[str, ...]


def classify_priority(average_percentage: float,
                      urgent_below: float = DEFAULT_URGENT_BELOW,
                      moderate_below: float = DEFAULT_MODERATE_BELOW) -> GapPriority:
    """Bands are closed on the lower bound: exactly 40 is moderate, exactly 60 is low."""
    if average_percentage < urgent_below:
        return GapPriority.URGENT
    if average_percentage < moderate_below:
        return GapPriority.MODERATE
    return GapPriority.LOW


def mastery_level(percentage: float) -> MasteryLevel:
    if percentage >= 80:
        return MasteryLevel.EXCELLENT
    if percentage >= 70:
        return MasteryLevel.GOOD
    if percentage >= 60:
        return MasteryLevel.AVERAGE
    if percentage >= 50:
        return MasteryLevel.NEEDS_WORK
    return MasteryLevel.CRITICAL


def performance_band(percentage: float) -> PerformanceBand:
    if percentage >= 80:
        return PerformanceBand.EXCELLENT
    if percentage >= 70:
        return PerformanceBand.GOOD
    if percentage >= 60:
        return PerformanceBand.FAIR
    return PerformanceBand.NEEDS_WORK


def sub_topic_average(sub_topic: SubTopic, cohort: Sequence[Student]) -> float:
    """Cohort mean of a sub-topic percentage, counting missing scores as zero."""
    return mean([sub_topic_percentage(student, sub_topic) for student in cohort])


def sub_topic_gap(sub_topic: SubTopic, cohort: Sequence[Student], subject: Optional[Subject] = None,
                  urgent_below: float = DEFAULT_URGENT_BELOW,
                  moderate_below: float = DEFAULT_MODERATE_BELOW) -> SubTopicGap:
    """Average, highest and lowest sub-topic percentage of a cohort, with its priority."""
    percentages = [sub_topic_percentage(student, sub_topic) for student in cohort]
    average = mean(percentages)
    return SubTopicGap(
        sub_topic_id=sub_topic.id,
        name=sub_topic.name,
        subject_code=subject.code if subject else "",
        subject_name=subject.name if subject else "",
        max_score=sub_topic.max_score,
        average_percentage=average,
        highest_percentage=max(percentages, default=0.0),
        lowest_percentage=min(percentages, default=0.0),
        priority=classify_priority(average, urgent_below, moderate_below),
    )


def gap_report(subjects: Sequence[Subject], cohort: Sequence[Student],
               urgent_below: float = DEFAULT_URGENT_BELOW,
               moderate_below: float = DEFAULT_MODERATE_BELOW) -> List[SubTopicGap]:
    """Gaps for every sub-topic of the given subjects, weakest first.

    Recommendation lists read this order, so equal averages keep catalog
    order.
    """
    gaps = [
        sub_topic_gap(sub_topic, cohort, subject, urgent_below, moderate_below)
        for subject in subjects
        for sub_topic in subject.sub_topics
    ]
    logger.debug("Gap report over %d sub-topics and %d students", len(gaps), len(cohort))
    return sorted(gaps, key=lambda gap: gap.average_percentage)


def _topic_result(student: Student, subject: Subject, sub_topic: SubTopic, recommendation: str = "") -> TopicResult:
    return TopicResult(
        sub_topic_id=sub_topic.id,
        name=sub_topic.name,
        subject_code=subject.code,
        subject_name=subject.name,
        score=clamped_score(student, sub_topic),
        max_score=sub_topic.max_score,
        percentage=sub_topic_percentage(student, sub_topic),
        recommendation=recommendation,
    )


def student_weaknesses(student: Student, subjects: Sequence[Subject],
                       threshold: float = DEFAULT_ATTENTION_THRESHOLD) -> List[TopicResult]:
    """Sub-topics where a student is below ``threshold`` percent, weakest first."""
    weaknesses = [
        _topic_result(student, subject, sub_topic, f"Review {subject.name} - {sub_topic.name}")
        for subject in subjects
        for sub_topic in subject.sub_topics
        if sub_topic_percentage(student, sub_topic) < threshold
    ]
    return sorted(weaknesses, key=lambda topic: topic.percentage)


def student_strengths(student: Student, subjects: Sequence[Subject],
                      threshold: float = DEFAULT_STRENGTH_THRESHOLD) -> List[TopicResult]:
    """Sub-topics where a student reaches ``threshold`` percent, strongest first."""
    strengths = [
        _topic_result(student, subject, sub_topic)
        for subject in subjects
        for sub_topic in subject.sub_topics
        if sub_topic_percentage(student, sub_topic) >= threshold
    ]
    return sorted(strengths, key=lambda topic: topic.percentage, reverse=True)


def mastery_heatmap(cohort: Sequence[Student], subjects: Sequence[Subject],
                    threshold: float = DEFAULT_ATTENTION_THRESHOLD) -> MasteryHeatmap:
    """Build the sub-topic mastery matrix of a cohort."""
    sub_topics = [sub_topic for subject in subjects for sub_topic in subject.sub_topics]
    cells = tuple(
        tuple(sub_topic_percentage(student, sub_topic) for sub_topic in sub_topics)
        for student in cohort
    )
    column_averages = tuple(
        mean([row[index] for row in cells]) for index in range(len(sub_topics))
    )
    return MasteryHeatmap(
        columns=tuple(sub_topic.id for sub_topic in sub_topics),
        rows=tuple(student.id for student in cohort),
        cells=cells,
        row_averages=tuple(mean(row) for row in cells),
        column_averages=column_averages,
        problem_columns=tuple(
            sub_topic.id for sub_topic, average in zip(sub_topics, column_averages) if average < threshold
        ),
    )


def priority_counts(gaps: Sequence[SubTopicGap]) -> Dict[str, int]:
    counts = {priority.value: 0 for priority in GapPriority}
    for gap in gaps:
        counts[gap.priority.value] += 1
    return counts
