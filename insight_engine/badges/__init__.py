"""
Badges: explainable badge eligibility.

- criteria: Progress Star, Mastery Badge and Persistence rules
- suggestion: BadgeSuggestion / BadgeEvidence output records
- display: display names and evidence lines
"""

from insight_engine.badges.criteria import (
    evaluate_badge_criteria,
    evaluate_class_badges,
    evaluate_focus_badge,
    evaluate_mastery_badge,
    evaluate_progress_star,
)
from insight_engine.badges.display import format_evidence, get_badge_display_name
from insight_engine.badges.suggestion import BadgeEvidence, BadgeSuggestion

__all__ = [
    "BadgeEvidence",
    "BadgeSuggestion",
    "evaluate_badge_criteria",
    "evaluate_class_badges",
    "evaluate_focus_badge",
    "evaluate_mastery_badge",
    "evaluate_progress_star",
    "format_evidence",
    "get_badge_display_name",
]
