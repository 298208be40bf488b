"""Display helpers for badge suggestions."""

from __future__ import annotations

from insight_engine.badges.suggestion import BadgeEvidence
from insight_engine.core.models import BadgeType, round_half_up

BADGE_DISPLAY_NAMES: dict[BadgeType, str] = {
    BadgeType.PROGRESS_STAR: "Progress Star",
    BadgeType.MASTERY_BADGE: "Mastery Badge",
    BadgeType.EFFORT_AWARD: "Effort Award",
    BadgeType.HELPER_BADGE: "Helper Badge",
    BadgeType.PERSISTENCE: "Persistence",
    BadgeType.CURIOSITY: "Curiosity Award",
    BadgeType.FOCUS_BADGE: "Focus Badge",
    BadgeType.CREATIVITY_BADGE: "Creativity Badge",
    BadgeType.COLLABORATION_BADGE: "Collaboration Badge",
    BadgeType.CUSTOM: "Custom Badge",
}


def get_badge_display_name(badge_type: BadgeType | str) -> str:
    """Human-readable badge name; unknown values come back unchanged."""
    try:
        return BADGE_DISPLAY_NAMES[BadgeType(badge_type)]
    except ValueError:
        return str(badge_type)


def format_evidence(evidence: BadgeEvidence) -> list[str]:
    """
    Render badge evidence as short display lines.

    Only populated fields produce a line, in a fixed order.
    """
    lines: list[str] = []

    if evidence.assignment_title:
        lines.append(f"Assignment: {evidence.assignment_title}")
    if evidence.previous_score is not None:
        lines.append(f"Previous score: {round_half_up(evidence.previous_score)}%")
    if evidence.current_score is not None:
        lines.append(f"Current score: {round_half_up(evidence.current_score)}%")
    if evidence.improvement is not None:
        lines.append(f"Improvement: +{round_half_up(evidence.improvement)} points")
    if evidence.days_since_first_attempt is not None:
        lines.append(f"Days since first attempt: {evidence.days_since_first_attempt:g}")

    if evidence.subject_assignment_count is not None:
        lines.append(f"Lessons in subject: {evidence.subject_assignment_count}")
    if evidence.subject_average_score is not None:
        lines.append(f"Subject average: {round_half_up(evidence.subject_average_score)}%")
    if evidence.subject_hint_usage_rate is not None:
        lines.append(
            f"Subject hint usage: {round_half_up(evidence.subject_hint_usage_rate * 100)}%"
        )
    if evidence.distinct_days is not None:
        lines.append(f"Distinct days: {evidence.distinct_days}")

    if evidence.hint_usage_rate is not None:
        lines.append(f"Hint usage: {round_half_up(evidence.hint_usage_rate * 100)}%")
    if evidence.time_spent_minutes is not None:
        lines.append(f"Time spent: {round_half_up(evidence.time_spent_minutes)} min")
    if evidence.question_count is not None:
        lines.append(f"Questions: {evidence.question_count}")

    return lines
