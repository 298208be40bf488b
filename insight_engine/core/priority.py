"""
Priority ordering and de-duplication.

Shared by the badge evaluator (several subjects qualifying for Mastery at
once) and the attention classifier (several attention-now
recommendations for one student). All sorts are stable: ties keep their
input order, no secondary tie-break is applied.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from typing import Protocol, TypeVar

from insight_engine.core.models import Recommendation, SuggestionPriority


class Prioritized(Protocol):
    """Anything carrying a high/medium/low priority."""

    @property
    def priority(self) -> SuggestionPriority: ...


class Deduplicable(Prioritized, Protocol):
    def dedupe_key(self) -> Hashable: ...


P = TypeVar("P", bound=Prioritized)
D = TypeVar("D", bound=Deduplicable)


def sort_by_priority(items: Iterable[P]) -> list[P]:
    """Stable sort: high before medium before low."""
    return sorted(items, key=lambda item: item.priority.rank)


def pick_highest_priority(candidates: Sequence[P]) -> P | None:
    """
    Return the highest-priority candidate.

    Among equal priorities the first in input order wins.
    """
    if not candidates:
        return None
    return sort_by_priority(candidates)[0]


def dedupe_suggestions(items: Iterable[D]) -> list[D]:
    """
    Keep one item per dedupe key, preferring the highest priority.

    Returns the survivors in priority order.
    """
    seen: set[Hashable] = set()
    kept: list[D] = []
    for item in sort_by_priority(items):
        key = item.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        kept.append(item)
    return kept


def highest_numeric_priority(recommendations: Sequence[Recommendation]) -> Recommendation | None:
    """Recommendation with the largest numeric priority (first on ties)."""
    if not recommendations:
        return None
    return max(recommendations, key=lambda rec: rec.priority)
