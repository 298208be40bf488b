"""
Badge suggestion output records.

A suggestion carries the numbers behind it so a teacher (or an audit)
can review the decision without re-running the rules.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from insight_engine.core.models import BadgeType, SuggestionPriority


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class BadgeEvidence:
    """
    Structured evidence for a badge suggestion.

    Only the fields relevant to the badge type are filled in.
    """

    # Progress Star
    previous_score: float | None = None
    current_score: float | None = None
    improvement: float | None = None
    assignment_id: str | None = None
    assignment_title: str | None = None
    days_since_first_attempt: float | None = None

    # Mastery Badge
    subject_assignment_count: int | None = None
    subject_average_score: float | None = None
    subject_hint_usage_rate: float | None = None
    distinct_days: int | None = None
    assignment_ids: list[str] = field(default_factory=list)

    # Persistence
    hint_usage_rate: float | None = None
    time_spent_minutes: float | None = None
    question_count: int | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to camelCase dictionary, dropping unset fields."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == []:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            result[_camel(f.name)] = value
        return result


@dataclass
class BadgeSuggestion:
    """A suggestion to award a badge, with its explanation."""

    student_id: str
    student_name: str
    badge_type: BadgeType
    reason: str
    evidence: BadgeEvidence
    priority: SuggestionPriority
    subject: str | None = None
    assignment_id: str | None = None
    assignment_title: str | None = None

    def dedupe_key(self) -> Hashable:
        return (self.student_id, self.badge_type, self.subject, self.assignment_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form."""
        result: dict[str, Any] = {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "badgeType": self.badge_type.value,
            "reason": self.reason,
            "evidence": self.evidence.to_dict(),
            "priority": self.priority.value,
        }
        if self.subject is not None:
            result["subject"] = self.subject
        if self.assignment_id is not None:
            result["assignmentId"] = self.assignment_id
        if self.assignment_title is not None:
            result["assignmentTitle"] = self.assignment_title
        return result
