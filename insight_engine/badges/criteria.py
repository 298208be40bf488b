"""
Badge Criteria Evaluator.

Formal, explainable badge criteria:
- Progress Star: growth on a repeated assignment
- Mastery Badge: consistent excellence across a subject
- Persistence (Focus): completing work despite heavy coaching

Each rule returns a single BadgeSuggestion or None. None simply means
"not eligible this time": missing data, insufficient history and active
cooldowns all decline quietly, there is no error path.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from loguru import logger

from insight_engine.badges.suggestion import BadgeEvidence, BadgeSuggestion
from insight_engine.config import BadgeCriteria
from insight_engine.core.cooldown import (
    calculate_days_since,
    focus_badge_blocked,
    mastery_badge_blocked_for_subject,
    progress_star_blocked_for_assignment,
    progress_star_blocked_for_subject,
)
from insight_engine.core.models import (
    BadgeType,
    StudentBadgeContext,
    SuggestionPriority,
    round_half_up,
)
from insight_engine.core.priority import dedupe_suggestions, pick_highest_priority


def evaluate_progress_star(
    context: StudentBadgeContext,
    now: datetime | None = None,
    criteria: BadgeCriteria | None = None,
) -> BadgeSuggestion | None:
    """
    Evaluate Progress Star eligibility (assignment-level improvement).

    Criteria:
    - At least one earlier attempt on the same assignment
    - +20 points over the *earliest* attempt (rewards sustained growth)
    - Final score >= 60%
    - Earliest attempt within the last 30 days
    - Never awarded for this assignment; not awarded for the subject
      in the last 14 days
    """
    rules = (criteria or BadgeCriteria()).progress_star
    now = now or datetime.now(UTC)
    attempt = context.current_attempt

    if attempt is None:
        return None

    same_assignment = [
        a for a in context.previous_attempts if a.assignment_id == attempt.assignment_id
    ]
    if not same_assignment or len(same_assignment) + 1 < rules.min_attempts:
        return None

    # min() keeps the first of several attempts sharing a timestamp
    earliest = min(same_assignment, key=lambda a: a.completed_at)
    improvement = round(attempt.score - earliest.score, 9)
    days_since_earliest = calculate_days_since(earliest.completed_at, now)

    if improvement < rules.min_improvement:
        logger.debug(
            f"Progress star declined for {context.student_id}: "
            f"improvement {improvement:.1f} < {rules.min_improvement}"
        )
        return None
    if attempt.score < rules.min_final_score:
        logger.debug(
            f"Progress star declined for {context.student_id}: "
            f"final score {attempt.score:.1f} < {rules.min_final_score}"
        )
        return None
    if days_since_earliest > rules.max_days_since_earliest:
        logger.debug(
            f"Progress star declined for {context.student_id}: "
            f"first attempt {days_since_earliest:.1f} days ago"
        )
        return None

    if progress_star_blocked_for_assignment(
        attempt.assignment_id, context.awarded_badges, now, rules
    ):
        logger.debug(
            f"Progress star declined for {context.student_id}: "
            f"already awarded for {attempt.assignment_id}"
        )
        return None
    if progress_star_blocked_for_subject(attempt.subject, context.awarded_badges, now, rules):
        logger.debug(
            f"Progress star declined for {context.student_id}: "
            f"subject {attempt.subject} on cooldown"
        )
        return None

    priority = (
        SuggestionPriority.HIGH
        if improvement >= rules.high_priority_improvement
        else SuggestionPriority.MEDIUM
    )
    logger.debug(f"Progress star suggested for {context.student_id} (+{improvement:.1f})")

    return BadgeSuggestion(
        student_id=context.student_id,
        student_name=context.student_name,
        badge_type=BadgeType.PROGRESS_STAR,
        subject=attempt.subject,
        assignment_id=attempt.assignment_id,
        assignment_title=attempt.assignment_title,
        reason=(
            f"Improved +{round_half_up(improvement)} points on "
            f"{attempt.assignment_title or attempt.assignment_id}"
        ),
        evidence=BadgeEvidence(
            previous_score=earliest.score,
            current_score=attempt.score,
            improvement=improvement,
            assignment_id=attempt.assignment_id,
            assignment_title=attempt.assignment_title,
            days_since_first_attempt=round(days_since_earliest, 1),
        ),
        priority=priority,
    )


def evaluate_mastery_badge(
    context: StudentBadgeContext,
    now: datetime | None = None,
    criteria: BadgeCriteria | None = None,
) -> BadgeSuggestion | None:
    """
    Evaluate Mastery Badge eligibility (subject-level excellence).

    Criteria per subject:
    - 3+ assignments
    - 85%+ average score
    - <= 20% average hint usage
    - Work spread over 2+ distinct calendar days (UTC)
    - Not awarded for the subject in the last 30 days

    When several subjects qualify, only one is returned: a high priority
    subject (90%+ average) beats a medium one, otherwise input order wins.
    """
    rules = (criteria or BadgeCriteria()).mastery_badge
    now = now or datetime.now(UTC)

    candidates: list[BadgeSuggestion] = []
    for history in context.subject_history:
        assignments = history.assignments
        if len(assignments) < rules.min_assignments_in_subject:
            continue

        count = len(assignments)
        # Averages compared at 9 decimal places (3 x 0.2 / 3 is exactly 0.2)
        avg_score = round(sum(a.score for a in assignments) / count, 9)
        avg_hint_usage = round(sum(a.hint_usage_rate for a in assignments) / count, 9)
        distinct_days = len({a.completed_at.astimezone(UTC).date() for a in assignments})

        if avg_score < rules.min_subject_average_score:
            continue
        if avg_hint_usage > rules.max_hint_usage_rate:
            continue
        if distinct_days < rules.min_distinct_days:
            continue

        if mastery_badge_blocked_for_subject(
            history.subject, context.awarded_badges, now, rules
        ):
            logger.debug(
                f"Mastery badge declined for {context.student_id}: "
                f"{history.subject} on cooldown"
            )
            continue

        candidates.append(
            BadgeSuggestion(
                student_id=context.student_id,
                student_name=context.student_name,
                badge_type=BadgeType.MASTERY_BADGE,
                subject=history.subject,
                reason=(
                    f"{round_half_up(avg_score)}% average in {history.subject} "
                    f"across {count} lessons with low coach use"
                ),
                evidence=BadgeEvidence(
                    subject_assignment_count=count,
                    subject_average_score=avg_score,
                    subject_hint_usage_rate=avg_hint_usage,
                    distinct_days=distinct_days,
                    assignment_ids=[a.assignment_id for a in assignments],
                ),
                priority=(
                    SuggestionPriority.HIGH
                    if avg_score >= rules.high_priority_average_score
                    else SuggestionPriority.MEDIUM
                ),
            )
        )

    chosen = pick_highest_priority(candidates)
    if chosen is not None:
        logger.debug(
            f"Mastery badge suggested for {context.student_id} in {chosen.subject} "
            f"({len(candidates)} subject(s) qualified)"
        )
    return chosen


def evaluate_focus_badge(
    context: StudentBadgeContext,
    now: datetime | None = None,
    criteria: BadgeCriteria | None = None,
) -> BadgeSuggestion | None:
    """
    Evaluate Persistence eligibility (completion despite difficulty).

    Criteria:
    - Hints used on >= 60% of questions
    - Score >= 50%
    - Time spent >= 10 minutes, when time was recorded at all
    - No persistence badge for this student in the last 14 days
    """
    rules = (criteria or BadgeCriteria()).focus_badge
    now = now or datetime.now(UTC)
    attempt = context.current_attempt

    if attempt is None:
        return None
    if attempt.hint_usage_rate < rules.min_hint_usage_rate:
        return None
    if attempt.score < rules.min_score:
        return None

    # Missing telemetry is not held against the student
    if (
        attempt.time_spent_minutes is not None
        and attempt.time_spent_minutes < rules.min_time_spent_minutes
    ):
        logger.debug(
            f"Persistence declined for {context.student_id}: "
            f"{attempt.time_spent_minutes:.1f} minutes spent"
        )
        return None

    if focus_badge_blocked(context.awarded_badges, now, rules):
        logger.debug(f"Persistence declined for {context.student_id}: on cooldown")
        return None

    logger.debug(f"Persistence suggested for {context.student_id}")

    return BadgeSuggestion(
        student_id=context.student_id,
        student_name=context.student_name,
        badge_type=BadgeType.PERSISTENCE,
        subject=attempt.subject,
        assignment_id=attempt.assignment_id,
        assignment_title=attempt.assignment_title,
        reason="Completed despite heavy coaching, great persistence",
        evidence=BadgeEvidence(
            hint_usage_rate=attempt.hint_usage_rate,
            time_spent_minutes=attempt.time_spent_minutes,
            question_count=attempt.question_count,
            current_score=attempt.score,
            completed_at=attempt.completed_at,
        ),
        priority=(
            SuggestionPriority.HIGH
            if attempt.score >= rules.high_priority_score
            else SuggestionPriority.MEDIUM
        ),
    )


def evaluate_badge_criteria(
    context: StudentBadgeContext,
    now: datetime | None = None,
    criteria: BadgeCriteria | None = None,
) -> list[BadgeSuggestion]:
    """Evaluate all badge rules for a student; zero to three suggestions."""
    now = now or datetime.now(UTC)
    criteria = criteria or BadgeCriteria()

    suggestions = []
    for evaluate in (evaluate_progress_star, evaluate_mastery_badge, evaluate_focus_badge):
        suggestion = evaluate(context, now, criteria)
        if suggestion:
            suggestions.append(suggestion)
    return suggestions


def evaluate_class_badges(
    contexts: Iterable[StudentBadgeContext],
    now: datetime | None = None,
    criteria: BadgeCriteria | None = None,
) -> list[BadgeSuggestion]:
    """
    Evaluate a batch of students against one clock.

    Returns the de-duplicated union of suggestions, highest priority first.
    """
    now = now or datetime.now(UTC)
    criteria = criteria or BadgeCriteria()

    suggestions: list[BadgeSuggestion] = []
    for context in contexts:
        suggestions.extend(evaluate_badge_criteria(context, now, criteria))
    return dedupe_suggestions(suggestions)
