"""
Analytics service: a validated subject catalog plus configuration, with the
report builders the dashboards call.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import AnalyticsConfig
from ..core.entities import ClassGroup, Student, Subject, SubTopic
from ..core.exceptions import InvalidInputError
from .comparison import (
    ClassAverage, RadarPoint, SkillProfile,
    class_comparison, radar_series, skill_profile, student_subject_percentages, subject_averages,
)
from .gap_analysis import SubTopicGap, TopicResult, gap_report, student_strengths, student_weaknesses
from .ranking import (
    RankResult, RankedStudent,
    bottom_n, needing_attention_count, rank, top_n,
)
from .scoring import ScoreResult, score_for_subject, total_score_for_student
from .statistics import (
    ClassStatistics, CohortStatistics, LabelledBoxPlot,
    box_plot, box_plots_by_class, class_statistics,
)
from .trends import TrendPoint, trend_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSummary:
    statistics: ClassStatistics
    top_students: List[RankedStudent]
    bottom_students: List[RankedStudent]
    needing_attention: int
    subject_averages: Dict[str, float]
    weakest_topics: List[SubTopicGap]


@dataclass(frozen=True)
class StudentReport:
    student_id: str
    total: ScoreResult
    subject_scores: Dict[str, ScoreResult]
    rank: RankResult
    skill_profile: SkillProfile
    strengths: List[TopicResult] = field(default_factory=list)
    weaknesses: List[TopicResult] = field(default_factory=list)


@dataclass(frozen=True)
class ClassReport:
    comparison: List[ClassAverage]
    box_plots: List[LabelledBoxPlot]


class AnalyticsService:
    """Score analytics over one subject catalog.

    The catalog is validated when the service is created; cohorts are
    validated on every report call so that a bad join fails the whole call
    instead of producing partial numbers.
    """

    def __init__(self, subjects: Sequence[Subject], config: Optional[AnalyticsConfig] = None):
        self._subjects = tuple(subjects)
        self._config = config or AnalyticsConfig()
        self._sub_topics = self._validate_catalog(self._subjects)

    @property
    def subjects(self) -> Sequence[Subject]:
        return self._subjects

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    @staticmethod
    def _validate_catalog(subjects: Sequence[Subject]) -> Dict[str, SubTopic]:
        subject_ids = set()
        codes = set()
        sub_topics = {}
        for subject in subjects:
            if subject.id in subject_ids:
                raise InvalidInputError(f"Duplicate subject id {subject.id!r}", error_code="duplicate_subject")
            if subject.code in codes:
                raise InvalidInputError(f"Duplicate subject code {subject.code!r}", error_code="duplicate_subject_code")
            subject_ids.add(subject.id)
            codes.add(subject.code)
            for sub_topic in subject.sub_topics:
                if sub_topic.id in sub_topics:
                    raise InvalidInputError(
                        f"Sub-topic {sub_topic.id!r} appears in more than one subject",
                        error_code="duplicate_sub_topic",
                        details={"sub_topic_id": sub_topic.id},
                    )
                sub_topics[sub_topic.id] = sub_topic
        return sub_topics

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        for subject in self._subjects:
            if subject.id == subject_id:
                return subject
        return None

    def get_sub_topic(self, sub_topic_id: str) -> Optional[SubTopic]:
        return self._sub_topics.get(sub_topic_id)

    def validate_cohort(self, students: Sequence[Student]) -> None:
        """Check that student ids are unique and every score targets a known sub-topic."""
        seen = set()
        for student in students:
            if student.id in seen:
                logger.warning("Rejected cohort: duplicate student %s", student.id)
                raise InvalidInputError(
                    f"Student {student.id!r} appears more than once in the cohort",
                    error_code="duplicate_student",
                    details={"student_id": student.id},
                )
            seen.add(student.id)
            unknown = [sub_topic_id for sub_topic_id in student.sub_topic_ids if sub_topic_id not in self._sub_topics]
            if unknown:
                logger.warning("Rejected cohort: student %s scores unknown sub-topics %s", student.id, unknown)
                raise InvalidInputError(
                    f"Student {student.id!r} has scores for unknown sub-topics: {', '.join(unknown)}",
                    error_code="unknown_sub_topic",
                    details={"student_id": student.id, "sub_topic_ids": unknown},
                )
            self._warn_out_of_range(student)

    def _warn_out_of_range(self, student: Student) -> None:
        for entry in student.scores:
            max_score = self._sub_topics[entry.sub_topic_id].max_score
            if entry.score < 0 or entry.score > max_score:
                logger.warning(
                    "Score %s of student %s for sub-topic %s is outside [0, %s] and will be clamped",
                    entry.score, student.id, entry.sub_topic_id, max_score,
                )

    # Engine operations bound to this catalog and configuration

    def subject_score(self, student: Student, subject: Subject) -> ScoreResult:
        self.validate_cohort([student])
        return score_for_subject(student, subject)

    def total_score(self, student: Student) -> ScoreResult:
        self.validate_cohort([student])
        return total_score_for_student(student, self._subjects)

    def rank(self, student: Student, cohort: Sequence[Student]) -> RankResult:
        self.validate_cohort(cohort)
        return rank(student, cohort, self._subjects)

    def top_students(self, cohort: Sequence[Student], fraction: Optional[float] = None) -> List[RankedStudent]:
        self.validate_cohort(cohort)
        return top_n(cohort, self._subjects, self._config.top_fraction if fraction is None else fraction)

    def bottom_students(self, cohort: Sequence[Student], fraction: Optional[float] = None) -> List[RankedStudent]:
        self.validate_cohort(cohort)
        return bottom_n(cohort, self._subjects, self._config.bottom_fraction if fraction is None else fraction)

    def needing_attention(self, cohort: Sequence[Student], fraction: Optional[float] = None,
                          threshold: Optional[float] = None) -> int:
        self.validate_cohort(cohort)
        return needing_attention_count(
            cohort, self._subjects,
            self._config.bottom_fraction if fraction is None else fraction,
            self._config.attention_threshold if threshold is None else threshold,
        )

    def gap_report(self, cohort: Sequence[Student]) -> List[SubTopicGap]:
        self.validate_cohort(cohort)
        return gap_report(self._subjects, cohort, self._config.urgent_below, self._config.moderate_below)

    def box_plot(self, cohort: Sequence[Student], subject: Optional[Subject] = None) -> CohortStatistics:
        self.validate_cohort(cohort)
        return box_plot(cohort, self._subjects, subject, self._config.outlier_iqr_multiplier)

    def radar_series(self, cohort_a: Sequence[Student], cohort_b: Sequence[Student]) -> List[RadarPoint]:
        """Compare two cohorts (or a one-student cohort with its class) subject by subject."""
        self.validate_cohort(cohort_a)
        self.validate_cohort(cohort_b)
        return radar_series(subject_averages(cohort_a, self._subjects), subject_averages(cohort_b, self._subjects))

    def trend(self, labelled_cohorts: Sequence[Tuple[str, Sequence[Student]]], subject: Optional[Subject] = None,
              sub_topic: Optional[SubTopic] = None, student_id: Optional[str] = None) -> List[TrendPoint]:
        """Trend over assessments; each labelled cohort is validated on its own."""
        for _, cohort in labelled_cohorts:
            self.validate_cohort(cohort)
        return trend_series(labelled_cohorts, self._subjects, subject, sub_topic, student_id)

    # Reports

    def dashboard_summary(self, cohort: Sequence[Student], weakest_limit: int = 8) -> DashboardSummary:
        """Headline numbers of a class, program or school dashboard."""
        self.validate_cohort(cohort)
        config = self._config
        gaps = gap_report(self._subjects, cohort, config.urgent_below, config.moderate_below)
        summary = DashboardSummary(
            statistics=class_statistics(cohort, self._subjects),
            top_students=top_n(cohort, self._subjects, config.top_fraction),
            bottom_students=bottom_n(cohort, self._subjects, config.bottom_fraction),
            needing_attention=needing_attention_count(
                cohort, self._subjects, config.bottom_fraction, config.attention_threshold,
            ),
            subject_averages=subject_averages(cohort, self._subjects),
            weakest_topics=gaps[:max(weakest_limit, 0)],
        )
        logger.debug("Dashboard summary built for %d students", len(cohort))
        return summary

    def student_report(self, student: Student, class_cohort: Sequence[Student]) -> StudentReport:
        """Deep-dive report of one student against their class."""
        self.validate_cohort(class_cohort)
        config = self._config
        return StudentReport(
            student_id=student.id,
            total=total_score_for_student(student, self._subjects),
            subject_scores={subject.code: score_for_subject(student, subject) for subject in self._subjects},
            rank=rank(student, class_cohort, self._subjects),
            skill_profile=skill_profile(student, class_cohort, self._subjects, config.top_fraction),
            strengths=student_strengths(student, self._subjects, config.strength_threshold),
            weaknesses=student_weaknesses(student, self._subjects, config.weakness_threshold),
        )

    def class_report(self, students: Sequence[Student], classes: Sequence[ClassGroup],
                     subject: Optional[Subject] = None) -> ClassReport:
        """Class comparison and per-class box plots over a whole program."""
        self.validate_cohort(students)
        return ClassReport(
            comparison=class_comparison(students, classes, self._subjects),
            box_plots=box_plots_by_class(
                students, classes, self._subjects, subject, self._config.outlier_iqr_multiplier,
            ),
        )

    def subject_percentages(self, student: Student) -> Dict[str, float]:
        self.validate_cohort([student])
        return student_subject_percentages(student, self._subjects)
