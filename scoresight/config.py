"""
Configuration for the Scoresight engine and its entry points.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .core.enums import (
    DEFAULT_ATTENTION_THRESHOLD, DEFAULT_IQR_MULTIPLIER, DEFAULT_MODERATE_BELOW,
    DEFAULT_STRENGTH_THRESHOLD, DEFAULT_TOP_FRACTION, DEFAULT_URGENT_BELOW,
)
from .core.exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AnalyticsConfig(BaseModel):
    """Thresholds and fractions used when building reports."""
    attention_threshold: float = Field(DEFAULT_ATTENTION_THRESHOLD, ge=0, le=100)
    top_fraction: float = Field(DEFAULT_TOP_FRACTION, ge=0, le=1)
    bottom_fraction: float = Field(DEFAULT_TOP_FRACTION, ge=0, le=1)
    urgent_below: float = Field(DEFAULT_URGENT_BELOW, ge=0, le=100)
    moderate_below: float = Field(DEFAULT_MODERATE_BELOW, ge=0, le=100)
    strength_threshold: float = Field(DEFAULT_STRENGTH_THRESHOLD, ge=0, le=100)
    weakness_threshold: float = Field(DEFAULT_ATTENTION_THRESHOLD, ge=0, le=100)
    outlier_iqr_multiplier: float = Field(DEFAULT_IQR_MULTIPLIER, ge=0)
    log_level: str = Field("INFO", pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$')

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def _check_priority_bands(self) -> "AnalyticsConfig":
        if self.urgent_below > self.moderate_below:
            raise ValueError("urgent_below must not exceed moderate_below")
        return self


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> AnalyticsConfig:
    """Load configuration from a JSON file, then apply overrides."""
    data: Dict[str, Any] = {}
    if path:
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}", error_code="config_missing")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}", error_code="config_unreadable")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must hold a JSON object", error_code="config_shape")

    data.update(overrides or {})
    try:
        return AnalyticsConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            error_code="config_invalid",
            details={"errors": e.errors(include_url=False)},
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the command-line entry point."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
