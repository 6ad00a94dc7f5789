"""
Scoresight: score aggregation and ranking engine for school exam reporting.

Turns raw per-sub-topic scores into subject and total percentages, cohort
statistics, rank and percentile, gap-analysis priorities and skill-profile
series for dashboards.
"""

__version__ = "1.0.0"
__author__ = "Scoresight Development Team"
__description__ = "Score aggregation and ranking engine for exam dashboards"
