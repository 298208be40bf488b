"""
Attention aggregates: per student, per assignment, dashboard-wide.

``needs_attention`` is True ONLY when the student has a recommendation
passing ``is_attention_now_recommendation``. Celebrations, enrichment
and monitor-only records never set it, even while active.

Nothing here mutates recommendations: status changes belong to the
recommendation store, which hands in a fresh snapshot on every call.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from insight_engine.attention.classifier import (
    get_attention_reason,
    is_attention_now_recommendation,
    status_is_pending,
    status_is_resolved,
    status_needs_attention,
)
from insight_engine.config import AttentionThresholds
from insight_engine.core.models import AssignmentInfo, Recommendation
from insight_engine.core.priority import highest_numeric_priority


@dataclass
class StudentAttentionStatus:
    """Attention status for one student, optionally scoped to an assignment."""

    student_id: str
    student_name: str
    assignment_id: str  # "" = across assignments
    needs_attention: bool
    assignment_title: str | None = None
    attention_reason: str | None = None
    active_recommendation_ids: list[str] = field(default_factory=list)
    pending_recommendation_ids: list[str] = field(default_factory=list)
    resolved_recommendation_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "assignmentId": self.assignment_id,
            "assignmentTitle": self.assignment_title,
            "needsAttention": self.needs_attention,
            "attentionReason": self.attention_reason,
            "activeRecommendationIds": list(self.active_recommendation_ids),
            "pendingRecommendationIds": list(self.pending_recommendation_ids),
            "resolvedRecommendationIds": list(self.resolved_recommendation_ids),
        }


@dataclass
class AssignmentAttentionSummary:
    """Attention summary for one assignment."""

    assignment_id: str
    assignment_title: str
    total_students: int
    needing_attention_count: int
    pending_count: int
    resolved_count: int
    students_needing_attention: list[StudentAttentionStatus] = field(default_factory=list)
    students_pending: list[StudentAttentionStatus] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assignmentId": self.assignment_id,
            "assignmentTitle": self.assignment_title,
            "totalStudents": self.total_students,
            "needingAttentionCount": self.needing_attention_count,
            "pendingCount": self.pending_count,
            "resolvedCount": self.resolved_count,
            "studentsNeedingAttention": [s.to_dict() for s in self.students_needing_attention],
            "studentsPending": [s.to_dict() for s in self.students_pending],
        }


@dataclass
class DashboardAttentionState:
    """Full attention state for the educator dashboard."""

    students_needing_attention: list[StudentAttentionStatus]
    total_needing_attention: int
    assignment_summaries: list[AssignmentAttentionSummary]
    pending_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "studentsNeedingAttention": [s.to_dict() for s in self.students_needing_attention],
            "totalNeedingAttention": self.total_needing_attention,
            "assignmentSummaries": [s.to_dict() for s in self.assignment_summaries],
            "pendingCount": self.pending_count,
        }


@dataclass
class AttentionCounts:
    """Counts for dashboard badges."""

    total_needing_attention: int
    pending_count: int
    by_assignment: dict[str, int] = field(default_factory=dict)
    by_class: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalNeedingAttention": self.total_needing_attention,
            "pendingCount": self.pending_count,
            "byAssignment": dict(self.by_assignment),
            "byClass": dict(self.by_class),
        }


# ============================================================================
# Helpers
# ============================================================================


def default_student_name(student_id: str) -> str:
    """Placeholder name for students missing from the lookup."""
    return f"Student {student_id[:6]}"


def _for_student(
    recommendations: Iterable[Recommendation],
    student_id: str,
    assignment_id: str | None = None,
) -> list[Recommendation]:
    return [
        rec
        for rec in recommendations
        if student_id in rec.student_ids
        and (not assignment_id or rec.assignment_id == assignment_id)
    ]


def _student_ids(
    recommendations: Iterable[Recommendation],
    allowed: Iterable[str] | None = None,
) -> list[str]:
    """Distinct student ids in first-seen order."""
    allowed_set = set(allowed) if allowed is not None else None
    seen: dict[str, None] = {}
    for rec in recommendations:
        for student_id in rec.student_ids:
            if allowed_set is not None and student_id not in allowed_set:
                continue
            seen.setdefault(student_id, None)
    return list(seen)


# ============================================================================
# Core Attention Logic
# ============================================================================


def student_needs_attention(
    recommendations: Sequence[Recommendation],
    student_id: str,
    assignment_id: str | None = None,
    thresholds: AttentionThresholds | None = None,
) -> bool:
    """True if the student has any attention-now recommendation."""
    return any(
        is_attention_now_recommendation(rec, thresholds)
        for rec in _for_student(recommendations, student_id, assignment_id)
    )


def get_student_attention_status(
    recommendations: Sequence[Recommendation],
    student_id: str,
    student_name: str = "",
    assignment_id: str | None = None,
    assignment_title: str | None = None,
    thresholds: AttentionThresholds | None = None,
) -> StudentAttentionStatus:
    """
    Get detailed attention status for a student.

    The reason comes from the attention-now recommendation with the
    highest numeric priority. Without an assignment filter, that same
    recommendation also supplies the assignment id and title.
    """
    student_recs = _for_student(recommendations, student_id, assignment_id)

    active = [r for r in student_recs if status_needs_attention(r.status)]
    attention_now = [r for r in active if is_attention_now_recommendation(r, thresholds)]
    pending = [r for r in student_recs if status_is_pending(r.status)]
    resolved = [r for r in student_recs if status_is_resolved(r.status)]

    attention_reason = None
    derived_assignment_id = assignment_id or ""
    derived_assignment_title = assignment_title

    top = highest_numeric_priority(attention_now)
    if top is not None:
        attention_reason = get_attention_reason(top, thresholds)
        if not derived_assignment_id and top.assignment_id:
            derived_assignment_id = top.assignment_id
            derived_assignment_title = (
                derived_assignment_title
                or top.signals.assignment_title
                or top.signals.extras.get("lessonTitle")
            )

    return StudentAttentionStatus(
        student_id=student_id,
        student_name=student_name or default_student_name(student_id),
        assignment_id=derived_assignment_id,
        assignment_title=derived_assignment_title,
        needs_attention=bool(attention_now),
        attention_reason=attention_reason,
        active_recommendation_ids=[r.id for r in active],
        pending_recommendation_ids=[r.id for r in pending],
        resolved_recommendation_ids=[r.id for r in resolved],
    )


def get_students_needing_attention(
    recommendations: Sequence[Recommendation],
    student_map: Mapping[str, str],
    assignment_id: str | None = None,
    class_student_ids: Iterable[str] | None = None,
    thresholds: AttentionThresholds | None = None,
) -> list[StudentAttentionStatus]:
    """
    All students with an attention-now recommendation.

    Optionally narrowed to one assignment and/or one class roster. Sorted
    by number of active recommendations, most first (stable on ties).
    """
    relevant = list(recommendations)
    if assignment_id:
        relevant = [r for r in relevant if r.assignment_id == assignment_id]

    statuses = []
    for student_id in _student_ids(relevant, class_student_ids):
        status = get_student_attention_status(
            relevant,
            student_id,
            student_map.get(student_id, ""),
            assignment_id,
            thresholds=thresholds,
        )
        if status.needs_attention:
            statuses.append(status)

    statuses.sort(key=lambda s: len(s.active_recommendation_ids), reverse=True)
    return statuses


def get_assignment_attention_summary(
    recommendations: Sequence[Recommendation],
    assignment_id: str,
    assignment_title: str,
    student_map: Mapping[str, str],
    total_students: int,
    thresholds: AttentionThresholds | None = None,
) -> AssignmentAttentionSummary:
    """
    Partition an assignment's students into needing-attention, pending
    and resolved buckets. A student lands in the first bucket that applies.
    """
    assignment_recs = [r for r in recommendations if r.assignment_id == assignment_id]

    needing: list[StudentAttentionStatus] = []
    pending: list[StudentAttentionStatus] = []
    resolved_count = 0

    for student_id in _student_ids(assignment_recs):
        status = get_student_attention_status(
            assignment_recs,
            student_id,
            student_map.get(student_id, ""),
            assignment_id,
            assignment_title,
            thresholds,
        )
        if status.needs_attention:
            needing.append(status)
        elif status.pending_recommendation_ids:
            pending.append(status)
        elif status.resolved_recommendation_ids:
            resolved_count += 1

    return AssignmentAttentionSummary(
        assignment_id=assignment_id,
        assignment_title=assignment_title,
        total_students=total_students,
        needing_attention_count=len(needing),
        pending_count=len(pending),
        resolved_count=resolved_count,
        students_needing_attention=needing,
        students_pending=pending,
    )


def get_dashboard_attention_state(
    recommendations: Sequence[Recommendation],
    student_map: Mapping[str, str],
    assignments: Iterable[AssignmentInfo],
    thresholds: AttentionThresholds | None = None,
) -> DashboardAttentionState:
    """Dashboard-wide attention state across a list of assignments."""
    students = get_students_needing_attention(
        recommendations, student_map, thresholds=thresholds
    )
    pending_count = sum(1 for r in recommendations if status_is_pending(r.status))

    summaries = [
        get_assignment_attention_summary(
            recommendations,
            assignment.id,
            assignment.title,
            student_map,
            assignment.total_students,
            thresholds,
        )
        for assignment in assignments
    ]

    return DashboardAttentionState(
        students_needing_attention=students,
        total_needing_attention=len(students),
        assignment_summaries=summaries,
        pending_count=pending_count,
    )


def get_attention_counts(
    recommendations: Sequence[Recommendation],
    student_map: Mapping[str, str],
    class_rosters: Mapping[str, Iterable[str]] | None = None,
    thresholds: AttentionThresholds | None = None,
) -> AttentionCounts:
    """
    Badge counts for the dashboard.

    ``by_assignment`` counts distinct students needing attention on each
    assignment; ``by_class`` counts them per roster when rosters are given.
    """
    students = get_students_needing_attention(
        recommendations, student_map, thresholds=thresholds
    )
    flagged = {s.student_id for s in students}

    by_assignment: dict[str, set[str]] = {}
    for rec in recommendations:
        if not rec.assignment_id or not is_attention_now_recommendation(rec, thresholds):
            continue
        by_assignment.setdefault(rec.assignment_id, set()).update(rec.student_ids)

    by_class: dict[str, int] = {}
    for class_id, roster in (class_rosters or {}).items():
        by_class[class_id] = len(flagged.intersection(roster))

    return AttentionCounts(
        total_needing_attention=len(students),
        pending_count=sum(1 for r in recommendations if status_is_pending(r.status)),
        by_assignment={key: len(ids) for key, ids in by_assignment.items()},
        by_class=by_class,
    )


# ============================================================================
# Utility Functions for Actions
# ============================================================================


def get_students_to_remove_from_attention(
    all_recommendations: Sequence[Recommendation],
    acted_recommendation: Recommendation,
) -> list[str]:
    """
    Students to clear from "needs attention" after acting on a recommendation.

    A student is cleared when no OTHER active recommendation names them.
    Returns ids only; the caller performs any update.
    """
    to_remove = []
    for student_id in acted_recommendation.student_ids:
        has_other_active = any(
            rec.id != acted_recommendation.id
            and student_id in rec.student_ids
            and status_needs_attention(rec.status)
            for rec in all_recommendations
        )
        if not has_other_active:
            to_remove.append(student_id)
    return to_remove
