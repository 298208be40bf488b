"""
Unit tests for input records and output serialization.

Tests:
- Clamping of scores, rates and minutes at construction
- camelCase and snake_case field names
- Unknown insight types and extra signal keys
- BadgeSuggestion wire form
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from insight_engine.badges.suggestion import BadgeEvidence, BadgeSuggestion
from insight_engine.core.models import (
    BadgeType,
    CurrentAttempt,
    Recommendation,
    RecommendationStatus,
    RuleName,
    Signals,
    SuggestionPriority,
    round_half_up,
)


class TestClamping:
    def test_out_of_range_values(self):
        attempt = CurrentAttempt.model_validate(
            {
                "assignmentId": "asg-1",
                "score": 130,
                "hintUsageRate": -0.2,
                "timeSpentMinutes": -5,
                "completedAt": "2025-03-15T12:00:00Z",
            }
        )
        assert attempt.score == 100
        assert attempt.hint_usage_rate == 0
        assert attempt.time_spent_minutes == 0

    def test_signal_rates(self):
        signals = Signals.model_validate({"score": -4, "hintUsageRate": 1.7})
        assert signals.score == 0
        assert signals.hint_usage_rate == 1

    def test_naive_timestamp_becomes_utc(self):
        attempt = CurrentAttempt(
            assignment_id="asg-1", score=50, completed_at=datetime(2025, 3, 15, 12, 0)
        )
        assert attempt.completed_at.tzinfo is UTC

    @pytest.mark.parametrize("bad", [float("nan"), "nan", float("inf")])
    def test_non_finite_score_rejected(self, bad):
        with pytest.raises(ValidationError):
            CurrentAttempt.model_validate(
                {
                    "assignmentId": "asg-1",
                    "score": bad,
                    "hintUsageRate": 0.9,
                    "completedAt": "2025-03-15T12:00:00Z",
                }
            )

    def test_non_finite_context_rejected(self, make_context, days_ago):
        """A NaN score never reaches the badge rules."""
        with pytest.raises(ValidationError):
            make_context(
                currentAttempt={
                    "assignmentId": "asg-1",
                    "score": float("nan"),
                    "hintUsageRate": 0.9,
                    "completedAt": days_ago(0),
                }
            )

    def test_non_finite_signal_rejected(self):
        with pytest.raises(ValidationError):
            Signals.model_validate({"hintUsageRate": "nan"})

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            CurrentAttempt.model_validate({"assignmentId": "asg-1", "score": 50})


class TestRecommendation:
    def test_wire_form(self, make_recommendation):
        rec = make_recommendation(signals={"helpRequestCount": 3, "lessonTitle": "Decimals"})

        assert rec.status is RecommendationStatus.ACTIVE
        assert rec.rule_name == "needs-support"
        assert rec.signals.help_request_count == 3
        assert rec.signals.extras == {"lessonTitle": "Decimals"}

    def test_unknown_insight_type_is_unset(self, make_recommendation):
        rec = make_recommendation(insight_type="something_new")
        assert rec.insight_type is None

    def test_unknown_status_rejected(self, make_recommendation):
        with pytest.raises(ValidationError):
            make_recommendation(status="archived")

    def test_frozen(self, make_recommendation):
        rec = make_recommendation()
        with pytest.raises(ValidationError):
            rec.status = RecommendationStatus.RESOLVED


class TestEnums:
    def test_status_helpers(self):
        assert RecommendationStatus.ACTIVE.needs_attention
        assert RecommendationStatus.PENDING.is_pending
        assert RecommendationStatus.REVIEWED.is_resolved
        assert not RecommendationStatus.PENDING.is_resolved

    def test_rule_parse(self):
        assert RuleName.parse("group-support") is RuleName.GROUP_SUPPORT
        assert RuleName.parse("nope") is None
        assert RuleName.parse(None) is None

    def test_round_half_up(self):
        assert round_half_up(45.5) == 46
        assert round_half_up(44.4) == 44


class TestSuggestionSerialization:
    def test_to_dict(self):
        suggestion = BadgeSuggestion(
            student_id="stu-001",
            student_name="Alex Rivera",
            badge_type=BadgeType.PROGRESS_STAR,
            reason="Improved +37 points on Fractions Quiz",
            evidence=BadgeEvidence(previous_score=45, current_score=82, improvement=37),
            priority=SuggestionPriority.HIGH,
            assignment_id="asg-fractions",
        )
        assert suggestion.to_dict() == {
            "studentId": "stu-001",
            "studentName": "Alex Rivera",
            "badgeType": "progress_star",
            "reason": "Improved +37 points on Fractions Quiz",
            "evidence": {"previousScore": 45, "currentScore": 82, "improvement": 37},
            "priority": "high",
            "assignmentId": "asg-fractions",
        }

    def test_evidence_datetime(self):
        evidence = BadgeEvidence(completed_at=datetime(2025, 3, 15, tzinfo=UTC))
        assert evidence.to_dict() == {"completedAt": "2025-03-15T00:00:00+00:00"}
