"""
Core Module - shared models, cooldown ledger and priority utilities.

Components:
- models: enums and validated input records (contexts, recommendations)
- cooldown: badge suppression windows
- priority: stable priority ordering and de-duplication

Both the badge evaluator and the attention classifier build on these
rather than reimplementing them.
"""

from insight_engine.core.cooldown import calculate_days_since, is_within_cooldown
from insight_engine.core.models import (
    AssignmentInfo,
    AwardedBadge,
    BadgeType,
    CurrentAttempt,
    InsightType,
    PreviousAttempt,
    Recommendation,
    RecommendationStatus,
    RuleName,
    Signals,
    StudentBadgeContext,
    SubjectAssignment,
    SubjectHistory,
    SuggestionPriority,
    TriggerData,
)
from insight_engine.core.priority import (
    dedupe_suggestions,
    highest_numeric_priority,
    pick_highest_priority,
    sort_by_priority,
)

__all__ = [
    # Models
    "AssignmentInfo",
    "AwardedBadge",
    "BadgeType",
    "CurrentAttempt",
    "InsightType",
    "PreviousAttempt",
    "Recommendation",
    "RecommendationStatus",
    "RuleName",
    "Signals",
    "StudentBadgeContext",
    "SubjectAssignment",
    "SubjectHistory",
    "SuggestionPriority",
    "TriggerData",
    # Cooldown
    "calculate_days_since",
    "is_within_cooldown",
    # Priority
    "dedupe_suggestions",
    "highest_numeric_priority",
    "pick_highest_priority",
    "sort_by_priority",
]
