"""
Core module containing the immutable data model, enums and exceptions.
"""

from .entities import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "SubTopic",
    "Subject",
    "ScoreEntry",
    "Student",
    "ClassGroup",
    "ExamProgram",
    "members_of_class",
    "to_dict",

    # Enums
    "GapPriority",
    "PerformanceBand",
    "MasteryLevel",

    # Exceptions
    "ScoresightException",
    "InvalidInputError",
    "ConfigurationError",
]
