"""
API module for the REST facade over the aggregation engine.
"""

from .rest_api import ScoresightRestAPI

__all__ = [
    "ScoresightRestAPI",
]
