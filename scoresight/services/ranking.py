"""
Ranking, percentile and top/bottom cohort extraction.

Students are ordered by total percentage, highest first. Ties keep the
caller's input order; no other tie-break policy is applied.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.entities import Student, Subject
from ..core.enums import DEFAULT_ATTENTION_THRESHOLD
from ..core.exceptions import InvalidInputError
from .scoring import ScoreResult, score_for_subject, total_score_for_student
from .statistics import mean

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankResult:
    rank: int
    percentile: float
    cohort_size: int


@dataclass(frozen=True)
class RankedStudent:
    """A student with their total score and 1-based position in the cohort."""
    student: Student
    total: ScoreResult
    rank: int

    @property
    def percentage(self) -> float:
        return self.total.percentage


def percentile_for_rank(rank: int, cohort_size: int) -> float:
    """Rank-derived percentile where 100 is the best in the cohort.

    A cohort of one is the 100th percentile by definition.
    """
    if cohort_size > 1:
        return ((cohort_size - rank) / (cohort_size - 1)) * 100
    return 100.0


def selection_count(cohort_size: int, fraction: float) -> int:
    """Number of students in a top or bottom fraction: ``ceil(N * fraction)``, at least 1."""
    if fraction < 0 or fraction > 1 or math.isnan(fraction):
        raise InvalidInputError(
            f"fraction must be between 0 and 1, got {fraction}",
            error_code="invalid_fraction",
            details={"fraction": fraction},
        )
    if cohort_size <= 0:
        return 0
    return max(1, math.ceil(cohort_size * fraction))


def rank_cohort(cohort: Sequence[Student], subjects: Sequence[Subject]) -> List[RankedStudent]:
    """Order a cohort by total percentage, descending and stable."""
    totals = [(student, total_score_for_student(student, subjects)) for student in cohort]
    # sorted() is stable, so equal percentages keep input order
    ordered = sorted(totals, key=lambda item: item[1].percentage, reverse=True)
    return [
        RankedStudent(student=student, total=total, rank=position)
        for position, (student, total) in enumerate(ordered, start=1)
    ]


def _not_in_cohort(student: Student, cohort_size: int) -> InvalidInputError:
    return InvalidInputError(
        f"Student {student.id!r} is not a member of the cohort",
        error_code="not_in_cohort",
        details={"student_id": student.id, "cohort_size": cohort_size},
    )


def rank(student: Student, cohort: Sequence[Student], subjects: Sequence[Subject]) -> RankResult:
    """Get a student's rank and percentile within a cohort they belong to."""
    ranked = rank_cohort(cohort, subjects)
    for entry in ranked:
        if entry.student.id == student.id:
            return RankResult(
                rank=entry.rank,
                percentile=percentile_for_rank(entry.rank, len(ranked)),
                cohort_size=len(ranked),
            )
    raise _not_in_cohort(student, len(ranked))


def top_n(cohort: Sequence[Student], subjects: Sequence[Subject], fraction: float) -> List[RankedStudent]:
    """Highest-scoring ``ceil(N * fraction)`` students, best first."""
    ranked = rank_cohort(cohort, subjects)
    return ranked[:selection_count(len(ranked), fraction)]


def bottom_n(cohort: Sequence[Student], subjects: Sequence[Subject], fraction: float) -> List[RankedStudent]:
    """Lowest-scoring ``ceil(N * fraction)`` students, weakest first."""
    ranked = rank_cohort(cohort, subjects)
    count = selection_count(len(ranked), fraction)
    if count == 0:
        return []
    return list(reversed(ranked[-count:]))


def needing_attention_count(cohort: Sequence[Student], subjects: Sequence[Subject], fraction: float,
                            threshold: float = DEFAULT_ATTENTION_THRESHOLD) -> int:
    """How many of the bottom fraction score below ``threshold`` percent."""
    return sum(1 for entry in bottom_n(cohort, subjects, fraction) if entry.percentage < threshold)


def students_below_threshold(cohort: Sequence[Student], subjects: Sequence[Subject],
                             threshold: float = DEFAULT_ATTENTION_THRESHOLD,
                             limit: Optional[int] = None) -> List[RankedStudent]:
    """Every student below ``threshold`` percent, weakest first, optionally limited."""
    ranked = rank_cohort(cohort, subjects)
    below = [entry for entry in reversed(ranked) if entry.percentage < threshold]
    if limit is not None:
        below = below[:max(limit, 0)]
    return below


def top_fraction_average(cohort: Sequence[Student], subjects: Sequence[Subject], fraction: float,
                         subject: Optional[Subject] = None) -> float:
    """Average percentage of the top fraction of a cohort.

    Without ``subject`` the top group is chosen and averaged on total
    percentage. With ``subject`` the top group is chosen on that subject's
    percentage and averaged on it.
    """
    if subject is None:
        return mean([entry.percentage for entry in top_n(cohort, subjects, fraction)])

    percentages = sorted(
        (score_for_subject(student, subject).percentage for student in cohort),
        reverse=True,
    )
    return mean(percentages[:selection_count(len(percentages), fraction)])


def is_in_top_fraction(student: Student, cohort: Sequence[Student], subjects: Sequence[Subject],
                       fraction: float) -> bool:
    """Whether a student's total reaches the cut-off of the top fraction.

    Students tied with the last member of the top group count as inside it.
    """
    ranked = rank_cohort(cohort, subjects)
    entry = next((entry for entry in ranked if entry.student.id == student.id), None)
    if entry is None:
        raise _not_in_cohort(student, len(ranked))
    count = selection_count(len(ranked), fraction)
    return entry.percentage >= ranked[count - 1].percentage
