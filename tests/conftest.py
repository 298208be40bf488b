"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from insight_engine.core.models import Recommendation, StudentBadgeContext  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed evaluation clock."""
    return datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def days_ago(now):
    """Return a helper producing ISO timestamps relative to ``now``."""

    def _days_ago(days: float) -> str:
        return (now - timedelta(days=days)).isoformat()

    return _days_ago


@pytest.fixture
def make_context():
    """Build a StudentBadgeContext from camelCase keyword overrides."""

    def _make(**overrides) -> StudentBadgeContext:
        data = {"studentId": "stu-001", "studentName": "Alex Rivera"}
        data.update(overrides)
        return StudentBadgeContext.model_validate(data)

    return _make


@pytest.fixture
def make_recommendation():
    """Build a Recommendation with sensible defaults for an active check-in."""

    def _make(
        rec_id: str = "rec-1",
        *,
        status: str = "active",
        insight_type: str | None = "check_in",
        rule_name: str = "needs-support",
        signals: dict | None = None,
        student_ids: list[str] | None = None,
        assignment_id: str | None = "asg-fractions",
        priority: float = 50,
        **extra,
    ) -> Recommendation:
        data = {
            "id": rec_id,
            "status": status,
            "insightType": insight_type,
            "studentIds": student_ids if student_ids is not None else ["stu-001"],
            "assignmentId": assignment_id,
            "priority": priority,
            "triggerData": {"ruleName": rule_name, "signals": signals or {}},
        }
        data.update(extra)
        return Recommendation.model_validate(data)

    return _make


@pytest.fixture
def sample_student_map():
    """Student id -> name lookup."""
    return {
        "stu-001": "Alex Rivera",
        "stu-002": "Jordan Lee",
        "stu-003": "Sam Patel",
    }
