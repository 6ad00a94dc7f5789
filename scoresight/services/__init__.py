"""
Services module containing the aggregation engine and the analytics facade.
"""

from .scoring import ScoreResult, score_for_subject, total_score_for_student, sub_topic_percentage
from .statistics import CohortStatistics, Quartiles, cohort_stats, quartiles, class_statistics, box_plot
from .ranking import RankResult, RankedStudent, rank, rank_cohort, top_n, bottom_n, needing_attention_count
from .gap_analysis import SubTopicGap, classify_priority, sub_topic_gap, gap_report
from .comparison import RadarPoint, radar_series, subject_averages, skill_profile
from .trends import TrendPoint, trend_series
from .analytics_service import AnalyticsService

__all__ = [
    "ScoreResult",
    "score_for_subject",
    "total_score_for_student",
    "sub_topic_percentage",
    "CohortStatistics",
    "Quartiles",
    "cohort_stats",
    "quartiles",
    "class_statistics",
    "box_plot",
    "RankResult",
    "RankedStudent",
    "rank",
    "rank_cohort",
    "top_n",
    "bottom_n",
    "needing_attention_count",
    "SubTopicGap",
    "classify_priority",
    "sub_topic_gap",
    "gap_report",
    "RadarPoint",
    "radar_series",
    "subject_averages",
    "skill_profile",
    "TrendPoint",
    "trend_series",
    "AnalyticsService",
]
