"""
Subject and total score calculation.

A missing score entry counts as zero while its sub-topic's maximum score
still counts towards the denominator. Out-of-range scores are clamped into
``[0, max_score]`` so that a percentage never leaves ``[0, 100]``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ..core.entities import Student, Subject, SubTopic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    """Raw score, maximum score and percentage for one student."""
    score: float
    max_score: float
    percentage: float

    @classmethod
    def empty(cls) -> "ScoreResult":
        return cls(0.0, 0.0, 0.0)


def percentage_of(score: float, max_score: float) -> float:
    """Percentage of ``score`` over ``max_score``; exactly 0 when the maximum is 0."""
    if max_score > 0:
        return (score / max_score) * 100
    return 0.0


def clamped_score(student: Student, sub_topic: SubTopic) -> float:
    """Get a student's score for a sub-topic, 0 when missing, clamped to the sub-topic range."""
    score = student.score_for(sub_topic.id)
    if score is None:
        return 0.0
    if score < 0 or score > sub_topic.max_score:
        clamped = min(max(score, 0.0), sub_topic.max_score)
        logger.debug(
            "Clamped score %s of student %s for sub-topic %s to %s (max %s)",
            score, student.id, sub_topic.id, clamped, sub_topic.max_score,
        )
        return clamped
    return score


def sub_topic_percentage(student: Student, sub_topic: SubTopic) -> float:
    """Percentage a student reached on a single sub-topic."""
    return percentage_of(clamped_score(student, sub_topic), sub_topic.max_score)


def score_for_subject(student: Student, subject: Subject) -> ScoreResult:
    """Calculate a student's score in one subject."""
    score = math.fsum(clamped_score(student, sub_topic) for sub_topic in subject.sub_topics)
    max_score = subject.max_score
    return ScoreResult(score=score, max_score=max_score, percentage=percentage_of(score, max_score))


def total_score_for_student(student: Student, subjects: Sequence[Subject]) -> ScoreResult:
    """Calculate a student's total over the given subjects.

    The subject list defines the curriculum scope, so the same student can
    be totalled over a program or over any subset of it.
    """
    if not subjects:
        return ScoreResult.empty()

    results = [score_for_subject(student, subject) for subject in subjects]
    score = math.fsum(result.score for result in results)
    max_score = math.fsum(result.max_score for result in results)
    return ScoreResult(score=score, max_score=max_score, percentage=percentage_of(score, max_score))
