"""
Attention: which students need a teacher right now.

- classifier: the attention-now predicate, reason strings, signal lines
- aggregation: per-student, per-assignment and dashboard summaries
"""

from insight_engine.attention.aggregation import (
    AssignmentAttentionSummary,
    AttentionCounts,
    DashboardAttentionState,
    StudentAttentionStatus,
    get_assignment_attention_summary,
    get_attention_counts,
    get_dashboard_attention_state,
    get_student_attention_status,
    get_students_needing_attention,
    get_students_to_remove_from_attention,
    student_needs_attention,
)
from insight_engine.attention.classifier import (
    format_signals,
    get_attention_reason,
    is_attention_now_recommendation,
    is_developing_elevated,
    status_is_pending,
    status_is_resolved,
    status_needs_attention,
)

__all__ = [
    # Classifier
    "format_signals",
    "get_attention_reason",
    "is_attention_now_recommendation",
    "is_developing_elevated",
    "status_is_pending",
    "status_is_resolved",
    "status_needs_attention",
    # Aggregation
    "AssignmentAttentionSummary",
    "AttentionCounts",
    "DashboardAttentionState",
    "StudentAttentionStatus",
    "get_assignment_attention_summary",
    "get_attention_counts",
    "get_dashboard_attention_state",
    "get_student_attention_status",
    "get_students_needing_attention",
    "get_students_to_remove_from_attention",
    "student_needs_attention",
]
