"""
Configuration settings for the insight classification engine.

Every threshold the badge and attention rules consult lives here as a
named field. Uses Pydantic Settings so thresholds can be tuned through
environment variables (or a .env file) without touching rule logic:

    INSIGHT_BADGES__MASTERY_BADGE__MIN_DISTINCT_DAYS=3
    INSIGHT_ATTENTION__ESCALATION_HELP_REQUESTS=4
    INSIGHT_LOG_LEVEL=DEBUG

The rule functions never read settings on their own. Callers pass a
criteria/thresholds model explicitly, or get the defaults below.
"""
from __future__ import annotations

import math
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class ProgressStarCriteria(BaseModel):
    """Assignment-level improvement (Progress Star)."""

    model_config = ConfigDict(frozen=True)

    min_improvement: float = 20  # points over the earliest attempt
    min_final_score: float = 60
    min_attempts: int = 2  # current attempt + at least one prior
    max_days_since_earliest: float = 30
    cooldown_per_assignment_days: float = math.inf  # at most one ever
    cooldown_per_subject_days: float = 14
    high_priority_improvement: float = 30


class MasteryBadgeCriteria(BaseModel):
    """Subject-level consistent excellence (Mastery Badge)."""

    model_config = ConfigDict(frozen=True)

    min_assignments_in_subject: int = 3
    min_subject_average_score: float = 85
    max_hint_usage_rate: float = 0.20
    min_distinct_days: int = 2
    cooldown_per_subject_days: float = 30
    high_priority_average_score: float = 90


class FocusBadgeCriteria(BaseModel):
    """Completing work despite heavy coaching reliance (Persistence)."""

    model_config = ConfigDict(frozen=True)

    min_hint_usage_rate: float = 0.60
    min_time_spent_minutes: float = 10
    min_score: float = 50
    cooldown_days: float = 14  # per student, across subjects
    high_priority_score: float = 70


class BadgeCriteria(BaseModel):
    """All badge rule thresholds."""

    model_config = ConfigDict(frozen=True)

    progress_star: ProgressStarCriteria = Field(default_factory=ProgressStarCriteria)
    mastery_badge: MasteryBadgeCriteria = Field(default_factory=MasteryBadgeCriteria)
    focus_badge: FocusBadgeCriteria = Field(default_factory=FocusBadgeCriteria)


class AttentionThresholds(BaseModel):
    """Thresholds used by the attention classifier."""

    model_config = ConfigDict(frozen=True)

    # "developing" escalates when hint usage is strictly above this rate
    needs_support_hint_threshold: float = 0.5
    # ...or when help requests reach this count
    escalation_help_requests: int = 3
    # Hint rate above which reason strings call out hint usage
    high_hint_display_threshold: float = 0.5


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="INSIGHT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    badges: BadgeCriteria = Field(default_factory=BadgeCriteria)
    attention: AttentionThresholds = Field(default_factory=AttentionThresholds)

    log_level: LogLevel = Field(
        default="WARNING",
        description="Minimum level for the CLI's stderr log sink",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
