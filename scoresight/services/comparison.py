"""
Skill-profile comparison: per-subject averages and radar series.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from ..core.entities import ClassGroup, Student, Subject, members_of_class
from ..core.enums import DEFAULT_TOP_FRACTION
from .ranking import top_n
from .scoring import score_for_subject, total_score_for_student
from .statistics import mean

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RadarPoint:
    subject_code: str
    series_a: float
    series_b: float


@dataclass(frozen=True)
class ClassAverage:
    class_id: str
    class_name: str
    average: float
    student_count: int


@dataclass(frozen=True)
class SkillProfileRow:
    subject_code: str
    student: float
    class_average: float
    top_average: float


@dataclass(frozen=True)
class SkillProfile:
    rows: List[SkillProfileRow]
    gap_to_top: float


def radar_series(series_a: Mapping[str, float], series_b: Mapping[str, float]) -> List[RadarPoint]:
    """Merge two per-subject percentage maps into one ordered series.

    Codes follow ``series_a`` order, then codes found only in ``series_b``.
    A code absent from one side reads 0 there.
    """
    codes = list(series_a)
    codes.extend(code for code in series_b if code not in series_a)
    return [
        RadarPoint(subject_code=code, series_a=series_a.get(code, 0.0), series_b=series_b.get(code, 0.0))
        for code in codes
    ]


def student_subject_percentages(student: Student, subjects: Sequence[Subject]) -> Dict[str, float]:
    return {subject.code: score_for_subject(student, subject).percentage for subject in subjects}


def subject_averages(cohort: Sequence[Student], subjects: Sequence[Subject]) -> Dict[str, float]:
    """Cohort mean of each subject's percentage, keyed by subject code."""
    return {
        subject.code: mean([score_for_subject(student, subject).percentage for student in cohort])
        for subject in subjects
    }


def class_comparison(students: Sequence[Student], classes: Sequence[ClassGroup],
                     subjects: Sequence[Subject]) -> List[ClassAverage]:
    """Average total percentage of each class, in class order."""
    comparison = []
    for class_group in classes:
        members = members_of_class(students, class_group.id)
        comparison.append(ClassAverage(
            class_id=class_group.id,
            class_name=class_group.name,
            average=mean([total_score_for_student(student, subjects).percentage for student in members]),
            student_count=len(members),
        ))
    return comparison


def skill_profile(student: Student, class_cohort: Sequence[Student], subjects: Sequence[Subject],
                  top_fraction: float = DEFAULT_TOP_FRACTION) -> SkillProfile:
    """Compare a student's subject percentages with the class and its top group.

    The top group is picked once on total percentage and then averaged per
    subject. ``gap_to_top`` is how far the student's mean subject percentage
    trails the top group's; negative when the student is ahead.
    """
    top_group = [entry.student for entry in top_n(class_cohort, subjects, top_fraction)]
    student_series = student_subject_percentages(student, subjects)
    class_series = subject_averages(class_cohort, subjects)
    top_series = subject_averages(top_group, subjects)

    rows = [
        SkillProfileRow(
            subject_code=subject.code,
            student=student_series[subject.code],
            class_average=class_series[subject.code],
            top_average=top_series[subject.code],
        )
        for subject in subjects
    ]
    gap_to_top = mean([row.top_average for row in rows]) - mean([row.student for row in rows])
    logger.debug("Skill profile for %s against %d top students", student.id, len(top_group))
    return SkillProfile(rows=rows, gap_to_top=gap_to_top)
