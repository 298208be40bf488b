"""
Insight Engine - explainable badge and attention decisions.

Turns a student's activity history (scores, hint usage, coaching
signals, timing) into:
1. Badge suggestions with the evidence behind them
2. "Needs attention now" classification for teacher dashboards

Pure, synchronous computation: every function takes its full input as
arguments, performs no I/O and keeps no state between calls.
"""

from loguru import logger

from insight_engine.attention import (
    get_dashboard_attention_state,
    get_students_needing_attention,
    is_attention_now_recommendation,
)
from insight_engine.badges import evaluate_badge_criteria
from insight_engine.config import AttentionThresholds, BadgeCriteria, EngineSettings

# Library logging is opt-in; the CLI enables it
logger.disable("insight_engine")

__version__ = "1.0.0"

__all__ = [
    "AttentionThresholds",
    "BadgeCriteria",
    "EngineSettings",
    "evaluate_badge_criteria",
    "get_dashboard_attention_state",
    "get_students_needing_attention",
    "is_attention_now_recommendation",
]
