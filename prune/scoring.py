"""
Importance scoring and never-evict classification for history items.
"""

from datetime import datetime, timedelta
from typing import Optional

from .types import HistoryItem, MessageType, as_utc, utcnow

BASE_SCORE = 0.5

TYPE_WEIGHTS: dict[MessageType, float] = {
    MessageType.IMPORTANT_DECISION: 0.4,
    MessageType.ERROR_HANDLING: 0.3,
    MessageType.USER_QUERY: 0.2,
    MessageType.CODE_EXECUTION: 0.1,
    MessageType.SYSTEM_RESPONSE: 0.0,
    MessageType.CONTEXTUAL_INFO: -0.1,
}

# (keywords, bonus); every matching group applies
KEYWORD_BONUSES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("error", "bug"), 0.2),
    (("important", "critical"), 0.2),
    (("solution", "fix"), 0.15),
)

CODE_MARKERS = ("```", "fn ", "def ")
CODE_BONUS = 0.1

VERBOSE_LENGTH = 2000
VERBOSE_PENALTY = 0.1

RECENCY_WINDOW = timedelta(minutes=60)
RECENCY_BONUS = 0.1

ESSENTIAL_PREFIXES = ("system:",)
ESSENTIAL_KEYWORDS = ("error:", "exception", "config", "setting")


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def calculate_importance(item: HistoryItem, now: Optional[datetime] = None) -> float:
    """
    Score how valuable an item is to keep, in [0.0, 1.0].

    Additive model starting from 0.5: message type weight, keyword bonuses,
    code presence, a penalty for very long content and a bonus for items
    younger than an hour relative to ``now``.

    Args:
        item: Item to score
        now: Reference time for the recency bonus (default: current UTC time)

    Returns:
        Importance score clamped to [0.0, 1.0]
    """
    now = as_utc(now) if now else utcnow()
    score = BASE_SCORE + TYPE_WEIGHTS.get(item.message_type, 0.0)

    content_lower = item.content.lower()
    for keywords, bonus in KEYWORD_BONUSES:
        if any(keyword in content_lower for keyword in keywords):
            score += bonus

    if any(marker in item.content for marker in CODE_MARKERS):
        score += CODE_BONUS

    if len(item.content) > VERBOSE_LENGTH:
        score -= VERBOSE_PENALTY

    if now - as_utc(item.timestamp) < RECENCY_WINDOW:
        score += RECENCY_BONUS

    return clamp(score)


def is_essential(item: HistoryItem) -> bool:
    """Check whether an item must survive low-importance removal."""
    content_lower = item.content.lower()
    if content_lower.startswith(ESSENTIAL_PREFIXES):
        return True
    return any(keyword in content_lower for keyword in ESSENTIAL_KEYWORDS)
