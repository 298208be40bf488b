"""
Core Models - enums and input records consumed by the engine.

The calling layer assembles these snapshots from persisted session,
assignment and coaching history. Validation happens here, at
construction: out-of-range scores and rates are clamped rather than
rejected, so the rule functions downstream stay total. NaN and
infinity are not clamped: they fail validation like any malformed field.

Wire form is camelCase (``hintUsageRate``); snake_case field names are
accepted as well.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from loguru import logger
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# ============================================================================
# Enumerations
# ============================================================================


class BadgeType(str, Enum):
    """Recognition badges a teacher can award."""

    PROGRESS_STAR = "progress_star"
    MASTERY_BADGE = "mastery_badge"
    EFFORT_AWARD = "effort_award"
    HELPER_BADGE = "helper_badge"
    PERSISTENCE = "persistence"
    CURIOSITY = "curiosity"
    FOCUS_BADGE = "focus_badge"
    CREATIVITY_BADGE = "creativity_badge"
    COLLABORATION_BADGE = "collaboration_badge"
    CUSTOM = "custom"


class SuggestionPriority(str, Enum):
    """Priority attached to a badge suggestion."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: lower ranks sort first."""
        return {
            SuggestionPriority.HIGH: 0,
            SuggestionPriority.MEDIUM: 1,
            SuggestionPriority.LOW: 2,
        }[self]


class RecommendationStatus(str, Enum):
    """
    Recommendation lifecycle.

    ACTIVE is a needs-attention candidate, PENDING means the teacher acted
    and the student has yet to follow through, the rest are closed.
    """

    ACTIVE = "active"
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"
    REVIEWED = "reviewed"  # legacy

    @property
    def needs_attention(self) -> bool:
        return self is RecommendationStatus.ACTIVE

    @property
    def is_pending(self) -> bool:
        return self is RecommendationStatus.PENDING

    @property
    def is_resolved(self) -> bool:
        return self in (
            RecommendationStatus.RESOLVED,
            RecommendationStatus.DISMISSED,
            RecommendationStatus.REVIEWED,
        )


class InsightType(str, Enum):
    """Teacher-facing insight category of a recommendation."""

    CELEBRATE_PROGRESS = "celebrate_progress"
    CHALLENGE_OPPORTUNITY = "challenge_opportunity"
    CHECK_IN = "check_in"
    MONITOR = "monitor"


class RuleName(str, Enum):
    """Detection rules the classifier knows about."""

    NEEDS_SUPPORT = "needs-support"
    STRUGGLING_STUDENT = "struggling-student"
    CHECK_IN_SUGGESTED = "check-in-suggested"
    GROUP_SUPPORT = "group-support"
    DEVELOPING = "developing"
    NOTABLE_IMPROVEMENT = "notable-improvement"
    READY_FOR_CHALLENGE = "ready-for-challenge"
    WATCH_PROGRESS = "watch-progress"

    @classmethod
    def parse(cls, value: str | None) -> RuleName | None:
        """Map a raw rule name to a known rule, or None when unrecognised."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# ============================================================================
# Clamped field types
# ============================================================================


def clamp_score(value: float) -> float:
    """Clamp a score into the 0-100 scale."""
    return min(max(value, 0.0), 100.0)


def clamp_rate(value: float) -> float:
    """Clamp a usage rate into the 0-1 scale."""
    return min(max(value, 0.0), 1.0)


def round_half_up(value: float) -> int:
    """Round for display, halves going up (45.5 -> 46)."""
    return math.floor(value + 0.5)


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


Score = Annotated[float, AfterValidator(clamp_score)]
Rate = Annotated[float, AfterValidator(clamp_rate)]
Minutes = Annotated[float, AfterValidator(lambda value: max(value, 0.0))]
Timestamp = Annotated[datetime, AfterValidator(as_utc)]


class _Record(BaseModel):
    """Base for input snapshots: camelCase aliases, immutable, finite numbers only."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
    )


# ============================================================================
# Badge context
# ============================================================================


class CurrentAttempt(_Record):
    """The just-completed assignment attempt."""

    assignment_id: str
    assignment_title: str = ""
    subject: str | None = None
    score: Score
    hint_usage_rate: Rate = 0.0
    time_spent_minutes: Minutes | None = None
    question_count: int = 0
    completed_at: Timestamp


class PreviousAttempt(_Record):
    """A prior attempt, used for improvement detection."""

    assignment_id: str
    score: Score
    completed_at: Timestamp


class SubjectAssignment(_Record):
    """One completed assignment inside a subject's history."""

    assignment_id: str
    assignment_title: str = ""
    score: Score
    hint_usage_rate: Rate = 0.0
    completed_at: Timestamp


class SubjectHistory(_Record):
    subject: str
    assignments: list[SubjectAssignment] = Field(default_factory=list)


class AwardedBadge(_Record):
    """A previously issued badge, the cooldown ledger's input."""

    badge_type: BadgeType
    subject: str | None = None
    assignment_id: str | None = None
    awarded_at: Timestamp


class StudentBadgeContext(_Record):
    """
    Everything needed to evaluate one student's badge eligibility.

    Built fresh by the caller for every evaluation; never persisted here.
    """

    student_id: str
    student_name: str = ""
    current_attempt: CurrentAttempt | None = None
    previous_attempts: list[PreviousAttempt] = Field(default_factory=list)
    subject_history: list[SubjectHistory] = Field(default_factory=list)
    awarded_badges: list[AwardedBadge] = Field(default_factory=list)


# ============================================================================
# Recommendations
# ============================================================================


class Signals(_Record):
    """
    Signal values that triggered a recommendation.

    Known keys are typed; anything else is kept in ``extras`` so newer
    detection rules can attach data without breaking older readers.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
        extra="allow",
    )

    score: Score | None = None
    hint_usage_rate: Rate | None = None
    help_request_count: int | None = None
    student_count: int | None = None
    is_elevated: bool | None = None
    escalated_from_developing: bool | None = None
    student_name: str | None = None
    assignment_title: str | None = None
    class_name: str | None = None
    coach_intent: str | None = None
    average_score: Score | None = None

    @property
    def extras(self) -> dict[str, Any]:
        """Signal keys not covered by a typed field."""
        return dict(self.model_extra or {})


class TriggerData(_Record):
    """Audit trail: which rule fired and on what signals."""

    rule_name: str = ""
    signals: Signals = Field(default_factory=Signals)
    generated_at: Timestamp | None = None


class Recommendation(_Record):
    """
    A teacher-facing recommendation, owned by the recommendation store.

    ``status`` is changed by teacher actions elsewhere; the engine only
    reads whatever snapshot it is handed.
    """

    id: str
    status: RecommendationStatus
    insight_type: InsightType | None = None
    title: str = ""
    reason: str = ""
    summary: str = ""
    student_ids: list[str] = Field(default_factory=list)
    assignment_id: str | None = None
    priority: float = 0
    trigger_data: TriggerData = Field(default_factory=TriggerData)
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None

    @field_validator("insight_type", mode="before")
    @classmethod
    def _known_insight_type(cls, value: Any) -> Any:
        if value is None or isinstance(value, InsightType):
            return value
        try:
            return InsightType(value)
        except ValueError:
            logger.warning(f"Unknown insight type {value!r}; treating as unset")
            return None

    @property
    def rule_name(self) -> str:
        return self.trigger_data.rule_name

    @property
    def signals(self) -> Signals:
        return self.trigger_data.signals


class AssignmentInfo(_Record):
    """Assignment descriptor for dashboard summaries."""

    id: str
    title: str = ""
    total_students: int = 0
