"""
Unit tests for the cooldown ledger.

Tests:
- is_within_cooldown window arithmetic and the infinite window
- Per-badge-type suppression predicates
- Empty history suppresses nothing
"""

import math
from datetime import UTC, datetime, timedelta

from insight_engine.config import FocusBadgeCriteria
from insight_engine.core.cooldown import (
    calculate_days_since,
    focus_badge_blocked,
    is_within_cooldown,
    mastery_badge_blocked_for_subject,
    progress_star_blocked_for_assignment,
    progress_star_blocked_for_subject,
)
from insight_engine.core.models import AwardedBadge, BadgeType

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


def _badge(badge_type: BadgeType, days_ago: float, **kwargs) -> AwardedBadge:
    return AwardedBadge(
        badge_type=badge_type,
        awarded_at=NOW - timedelta(days=days_ago),
        **kwargs,
    )


class TestIsWithinCooldown:
    """Tests for the raw window check."""

    def test_inside_window(self):
        assert is_within_cooldown(NOW - timedelta(days=13), 14, NOW) is True

    def test_boundary_is_outside(self):
        """Exactly cooldown_days later the window has closed."""
        assert is_within_cooldown(NOW - timedelta(days=14), 14, NOW) is False

    def test_infinite_window_always_suppresses(self):
        long_ago = NOW - timedelta(days=3650)
        assert is_within_cooldown(long_ago, math.inf, NOW) is True

    def test_naive_timestamp_treated_as_utc(self):
        naive = datetime(2025, 3, 14, 12, 0)
        assert calculate_days_since(naive, NOW) == 1.0


class TestProgressStarCooldown:
    """Progress Star: once per assignment, 14 days per subject."""

    def test_empty_history_not_blocked(self):
        assert progress_star_blocked_for_assignment("asg-1", [], NOW) is False
        assert progress_star_blocked_for_assignment("asg-1", None, NOW) is False
        assert progress_star_blocked_for_subject("math", None, NOW) is False

    def test_assignment_blocked_forever(self):
        history = [_badge(BadgeType.PROGRESS_STAR, 400, assignment_id="asg-1")]
        assert progress_star_blocked_for_assignment("asg-1", history, NOW) is True
        assert progress_star_blocked_for_assignment("asg-2", history, NOW) is False

    def test_subject_window(self):
        recent = [_badge(BadgeType.PROGRESS_STAR, 5, subject="math")]
        old = [_badge(BadgeType.PROGRESS_STAR, 20, subject="math")]

        assert progress_star_blocked_for_subject("math", recent, NOW) is True
        assert progress_star_blocked_for_subject("reading", recent, NOW) is False
        assert progress_star_blocked_for_subject("math", old, NOW) is False

    def test_missing_subject_never_blocked(self):
        recent = [_badge(BadgeType.PROGRESS_STAR, 1, subject="math")]
        assert progress_star_blocked_for_subject(None, recent, NOW) is False

    def test_other_badge_types_ignored(self):
        history = [_badge(BadgeType.MASTERY_BADGE, 1, subject="math", assignment_id="asg-1")]
        assert progress_star_blocked_for_assignment("asg-1", history, NOW) is False
        assert progress_star_blocked_for_subject("math", history, NOW) is False


class TestMasteryAndFocusCooldown:
    def test_mastery_thirty_day_window(self):
        assert mastery_badge_blocked_for_subject(
            "math", [_badge(BadgeType.MASTERY_BADGE, 29, subject="math")], NOW
        ) is True
        assert mastery_badge_blocked_for_subject(
            "math", [_badge(BadgeType.MASTERY_BADGE, 31, subject="math")], NOW
        ) is False

    def test_focus_is_per_student_not_per_subject(self):
        history = [_badge(BadgeType.PERSISTENCE, 3, subject="reading")]
        assert focus_badge_blocked(history, NOW) is True

    def test_focus_window_configurable(self):
        history = [_badge(BadgeType.PERSISTENCE, 3)]
        criteria = FocusBadgeCriteria(cooldown_days=2)
        assert focus_badge_blocked(history, NOW, criteria) is False
