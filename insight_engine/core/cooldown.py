"""
Cooldown Ledger.

Answers "is this badge currently suppressed for this student?" from the
list of badges already issued. Suppression windows:

- Progress Star: once per assignment, ever; 14 days per subject
- Mastery Badge: 30 days per subject
- Persistence (Focus): 14 days per student, across subjects

An empty history suppresses nothing.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, datetime

from insight_engine.config import (
    FocusBadgeCriteria,
    MasteryBadgeCriteria,
    ProgressStarCriteria,
)
from insight_engine.core.models import AwardedBadge, BadgeType, as_utc


def calculate_days_since(moment: datetime, now: datetime | None = None) -> float:
    """
    Calculate days elapsed since a timestamp.

    Args:
        moment: Earlier timestamp (can be naive or aware)
        now: Current time (defaults to UTC now)

    Returns:
        Days elapsed as float (negative if ``moment`` is in the future)
    """
    if now is None:
        now = datetime.now(UTC)

    delta = as_utc(now) - as_utc(moment)
    return delta.total_seconds() / 86400.0


def is_within_cooldown(
    issued_at: datetime,
    cooldown_days: float,
    now: datetime | None = None,
) -> bool:
    """
    Check if an item issued at ``issued_at`` is still inside its cooldown.

    An infinite cooldown means the item is suppressed permanently.
    """
    if math.isinf(cooldown_days):
        return True
    return calculate_days_since(issued_at, now) < cooldown_days


def _any_within_cooldown(
    badges: Iterable[AwardedBadge],
    cooldown_days: float,
    now: datetime | None,
) -> bool:
    return any(is_within_cooldown(b.awarded_at, cooldown_days, now) for b in badges)


def progress_star_blocked_for_assignment(
    assignment_id: str,
    awarded_badges: Iterable[AwardedBadge] | None,
    now: datetime | None = None,
    criteria: ProgressStarCriteria | None = None,
) -> bool:
    """Progress Star already issued for this exact assignment."""
    criteria = criteria or ProgressStarCriteria()
    matching = (
        b
        for b in awarded_badges or ()
        if b.badge_type is BadgeType.PROGRESS_STAR and b.assignment_id == assignment_id
    )
    return _any_within_cooldown(matching, criteria.cooldown_per_assignment_days, now)


def progress_star_blocked_for_subject(
    subject: str | None,
    awarded_badges: Iterable[AwardedBadge] | None,
    now: datetime | None = None,
    criteria: ProgressStarCriteria | None = None,
) -> bool:
    """Progress Star issued for this subject within the subject window."""
    if not subject:
        return False
    criteria = criteria or ProgressStarCriteria()
    matching = (
        b
        for b in awarded_badges or ()
        if b.badge_type is BadgeType.PROGRESS_STAR and b.subject == subject
    )
    return _any_within_cooldown(matching, criteria.cooldown_per_subject_days, now)


def mastery_badge_blocked_for_subject(
    subject: str,
    awarded_badges: Iterable[AwardedBadge] | None,
    now: datetime | None = None,
    criteria: MasteryBadgeCriteria | None = None,
) -> bool:
    """Mastery Badge issued for this subject within the subject window."""
    criteria = criteria or MasteryBadgeCriteria()
    matching = (
        b
        for b in awarded_badges or ()
        if b.badge_type is BadgeType.MASTERY_BADGE and b.subject == subject
    )
    return _any_within_cooldown(matching, criteria.cooldown_per_subject_days, now)


def focus_badge_blocked(
    awarded_badges: Iterable[AwardedBadge] | None,
    now: datetime | None = None,
    criteria: FocusBadgeCriteria | None = None,
) -> bool:
    """Persistence badge issued to this student within the student window."""
    criteria = criteria or FocusBadgeCriteria()
    matching = (b for b in awarded_badges or () if b.badge_type is BadgeType.PERSISTENCE)
    return _any_within_cooldown(matching, criteria.cooldown_days, now)
