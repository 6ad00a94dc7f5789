"""
Enumerations and constants for the Scoresight engine.
"""

from enum import Enum


class GapPriority(Enum):
    """Priority of a sub-topic in gap analysis."""
    URGENT = "urgent"
    MODERATE = "moderate"
    LOW = "low"


class PerformanceBand(Enum):
    """Score badge shown next to a percentage."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    NEEDS_WORK = "Needs Work"


class MasteryLevel(Enum):
    """Heatmap label for a sub-topic percentage."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    NEEDS_WORK = "Needs Work"
    CRITICAL = "Critical"


# Default thresholds, in percent
DEFAULT_ATTENTION_THRESHOLD = 50.0
DEFAULT_URGENT_BELOW = 40.0
DEFAULT_MODERATE_BELOW = 60.0
DEFAULT_STRENGTH_THRESHOLD = 80.0
DEFAULT_TOP_FRACTION = 0.1
DEFAULT_IQR_MULTIPLIER = 1.5
