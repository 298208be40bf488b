"""
Attention Classifier - the single rule for "needs attention now".

A recommendation demands immediate teacher action only when:
  - its status is ACTIVE
  - AND its category is an intervention: needs support, check-in
    suggested, group support, or an elevated "developing" signal

Never attention-now, whatever the rule name says:
  - celebrate_progress, challenge_opportunity and monitor insights
  - notable-improvement, ready-for-challenge and watch-progress rules
  - any status other than ACTIVE (pending, resolved, dismissed, reviewed)

Every aggregate in ``insight_engine.attention.aggregation`` is built on
``is_attention_now_recommendation`` plus status filtering.
"""

from __future__ import annotations

import math
from typing import Any

from insight_engine.config import AttentionThresholds
from insight_engine.core.models import (
    InsightType,
    Recommendation,
    RecommendationStatus,
    RuleName,
    Signals,
    round_half_up,
)

# ============================================================================
# Status Classification
# ============================================================================


def status_needs_attention(status: RecommendationStatus) -> bool:
    """Active recommendations are needs-attention candidates."""
    return status.needs_attention


def status_is_pending(status: RecommendationStatus) -> bool:
    """Teacher acted; waiting on the student."""
    return status.is_pending


def status_is_resolved(status: RecommendationStatus) -> bool:
    """Resolved, dismissed or (legacy) reviewed."""
    return status.is_resolved


# ============================================================================
# Category-Based Filtering
# ============================================================================

ATTENTION_NOW_RULE_NAMES = frozenset(
    {
        RuleName.NEEDS_SUPPORT,
        RuleName.CHECK_IN_SUGGESTED,
        RuleName.GROUP_SUPPORT,
    }
)

# Only attention-now when elevated
CONDITIONAL_ATTENTION_RULE_NAMES = frozenset({RuleName.DEVELOPING})

EXCLUDED_ATTENTION_RULE_NAMES = frozenset(
    {
        RuleName.NOTABLE_IMPROVEMENT,
        RuleName.READY_FOR_CHALLENGE,
        RuleName.WATCH_PROGRESS,
    }
)

EXCLUDED_ATTENTION_INSIGHT_TYPES = frozenset(
    {
        InsightType.CELEBRATE_PROGRESS,
        InsightType.CHALLENGE_OPPORTUNITY,
        InsightType.MONITOR,
    }
)


def is_developing_elevated(
    rec: Recommendation,
    thresholds: AttentionThresholds | None = None,
) -> bool:
    """
    Check if a "developing" signal has escalated.

    Elevated when any of:
    - explicit isElevated flag
    - escalatedFromDeveloping flag
    - hint usage above the needs-support threshold
    - help requests at or above the escalation count
    """
    thresholds = thresholds or AttentionThresholds()
    signals = rec.signals

    if signals.is_elevated is True:
        return True
    if signals.escalated_from_developing is True:
        return True
    if (
        signals.hint_usage_rate is not None
        and signals.hint_usage_rate > thresholds.needs_support_hint_threshold
    ):
        return True
    if (
        signals.help_request_count is not None
        and signals.help_request_count >= thresholds.escalation_help_requests
    ):
        return True
    return False


def is_attention_now_recommendation(
    rec: Recommendation,
    thresholds: AttentionThresholds | None = None,
) -> bool:
    """
    Determine if a recommendation requires teacher attention now.

    Insight-type exclusion wins over rule-name inclusion, so a malformed
    celebration tagged "needs-support" still returns False.
    """
    if not status_needs_attention(rec.status):
        return False

    if rec.insight_type in EXCLUDED_ATTENTION_INSIGHT_TYPES:
        return False

    rule = RuleName.parse(rec.rule_name)
    if rule is None:
        # Unrecognised rule: only the check-in fallback can apply
        return rec.insight_type is InsightType.CHECK_IN

    if rule in EXCLUDED_ATTENTION_RULE_NAMES:
        return False
    if rule in ATTENTION_NOW_RULE_NAMES:
        return True
    if rule in CONDITIONAL_ATTENTION_RULE_NAMES:
        return is_developing_elevated(rec, thresholds)

    return rec.insight_type is InsightType.CHECK_IN


# ============================================================================
# Reason Strings
# ============================================================================


def _assignment_title(signals: Signals) -> str | None:
    return signals.assignment_title or signals.extras.get("lessonTitle")


def _needs_support_reason(signals: Signals) -> str:
    title = _assignment_title(signals)
    if title and signals.score is not None:
        return f"Needs support on {title} ({round_half_up(signals.score)}%)"
    if signals.score is not None:
        return f"Needs support ({round_half_up(signals.score)}%)"
    if title:
        return f"Needs support on {title}"
    return "Needs support"


def _group_support_reason(rec: Recommendation) -> str:
    count = rec.signals.student_count or len(rec.student_ids)
    if count:
        return f"Group needs support ({count} students)"
    return "Group needs support"


def _check_in_reason(signals: Signals, thresholds: AttentionThresholds) -> str:
    if signals.coach_intent == "support-seeking" or signals.help_request_count:
        return "Check-in suggested: seeking help in coach"
    if (
        signals.hint_usage_rate is not None
        and signals.hint_usage_rate > thresholds.high_hint_display_threshold
    ):
        percent = round_half_up(signals.hint_usage_rate * 100)
        return f"Check-in suggested: high hint usage ({percent}%)"
    if signals.score is not None:
        return f"Check-in suggested: scored {round_half_up(signals.score)}%"
    return "Check-in suggested"


def _developing_reason(signals: Signals, thresholds: AttentionThresholds) -> str:
    if (
        signals.help_request_count is not None
        and signals.help_request_count >= thresholds.escalation_help_requests
    ):
        return f"Developing: repeated help requests ({signals.help_request_count})"
    if (
        signals.hint_usage_rate is not None
        and signals.hint_usage_rate > thresholds.needs_support_hint_threshold
    ):
        percent = round_half_up(signals.hint_usage_rate * 100)
        return f"Developing: high hint usage ({percent}%)"
    if signals.is_elevated or signals.escalated_from_developing:
        return "Developing: escalated for support"
    title = _assignment_title(signals)
    if title and signals.score is not None:
        return f"Developing on {title} ({round_half_up(signals.score)}%)"
    return "Developing: review suggested"


def get_attention_reason(
    rec: Recommendation,
    thresholds: AttentionThresholds | None = None,
) -> str:
    """
    Short, problem-focused reason for an attention row.

    Examples:
        "Needs support on Fractions Quiz (28%)"
        "Group needs support (3 students)"
        "Check-in suggested: seeking help in coach"
        "Developing: repeated help requests (4)"

    Rules without a dedicated phrase fall back to the recommendation's
    own summary or reason text.
    """
    thresholds = thresholds or AttentionThresholds()
    rule = RuleName.parse(rec.rule_name)

    if rule in (RuleName.NEEDS_SUPPORT, RuleName.STRUGGLING_STUDENT):
        return _needs_support_reason(rec.signals)
    if rule is RuleName.GROUP_SUPPORT:
        return _group_support_reason(rec)
    if rule is RuleName.CHECK_IN_SUGGESTED:
        return _check_in_reason(rec.signals, thresholds)
    if rule is RuleName.DEVELOPING:
        return _developing_reason(rec.signals, thresholds)

    return rec.summary or rec.reason or rec.title or "Review suggested"


# ============================================================================
# Signal Formatting
# ============================================================================

# Untyped extras arrive unvalidated
_PERCENT_LABELS = {
    "score": "Score",
    "previousScore": "Previous score",
    "currentScore": "Current score",
    "averageScore": "Class average",
    "completionRate": "Completion rate",
}


def _whole_number(value: Any) -> int | None:
    """Round a numeric signal for display; None for anything non-finite or non-numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return round_half_up(value)


def _signal_line(key: str, value: Any) -> str | None:
    if key in _PERCENT_LABELS:
        percent = _whole_number(value)
        return f"{_PERCENT_LABELS[key]}: {percent}%" if percent is not None else None
    if key == "improvement":
        points = _whole_number(value)
        return f"Improvement: +{points}%" if points is not None else None
    if key == "hintUsageRate":
        return f"Hint usage: {round_half_up(value * 100)}%"
    if key == "coachIntent":
        if value == "support-seeking":
            return "Coach pattern: Seeking support"
        if value == "enrichment-seeking":
            return "Coach pattern: Seeking enrichment"
        return f"Coach pattern: {value}" if value else None
    if key == "hasTeacherNote":
        return "Has teacher note: Yes" if value else "Has teacher note: No"
    if key == "studentCount":
        return f"Students in group: {value}"
    if key == "studentNames":
        names = ", ".join(value) if isinstance(value, list) else value
        return f"Students: {names}"
    if key == "className":
        return f"Class: {value}"
    if key == "completedCount":
        return f"Completed: {value} students"
    if key == "daysSinceAssigned":
        return f"Days since assigned: {value}"
    if key == "helpRequestCount":
        return f"Help requests: {value}"
    if key == "escalatedFromDeveloping":
        return "Escalated from Developing due to repeated help requests" if value else None
    # Unknown keys are skipped
    return None


def format_signals(signals: Signals) -> list[str]:
    """Render a recommendation's signals as display lines."""
    lines = []
    for key, value in signals.model_dump(by_alias=True, exclude_none=True).items():
        line = _signal_line(key, value)
        if line:
            lines.append(line)
    return lines
