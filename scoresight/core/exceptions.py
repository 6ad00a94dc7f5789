"""
Custom exceptions for the Scoresight engine.
"""

from typing import Optional, Any, Dict


class ScoresightException(Exception):
    """Base exception for all Scoresight-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class InvalidInputError(ScoresightException):
    """Raised when input data is structurally inconsistent.

    Examples are a negative maximum score, a score entry pointing at a
    sub-topic that no known subject defines, or a ranked student that is
    not part of the cohort. Never raised for merely empty input.
    """
    pass


class ConfigurationError(ScoresightException):
    """Raised when configuration is invalid."""
    pass
