"""Test fixtures and configuration."""

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from prune import HistoryItem, MessageType, PrunePolicy, Role
from prune.estimators import NoOpEstimator

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
OLD = NOW - timedelta(hours=2)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time so importance scores are deterministic."""
    return NOW


@pytest.fixture
def old() -> datetime:
    """A timestamp outside the recency window of ``now``."""
    return OLD


@pytest.fixture
def basic_policy() -> PrunePolicy:
    """Small policy for testing."""
    return PrunePolicy(min_messages=2, full_retention_count=5)


@pytest.fixture
def noop_estimator() -> NoOpEstimator:
    """No-op token estimator for deterministic testing."""
    return NoOpEstimator(default_tokens=100)


@pytest.fixture
def make_item() -> Callable[..., HistoryItem]:
    """Factory for history items, old (no recency bonus) by default."""

    def _make(
        content: str,
        message_type: MessageType = MessageType.CONTEXTUAL_INFO,
        role: Role = Role.UNKNOWN,
        timestamp: datetime = OLD,
        token_count: int = 0,
        importance: float = 0.0,
    ) -> HistoryItem:
        return HistoryItem(
            content=content,
            role=role,
            message_type=message_type,
            timestamp=timestamp,
            token_count=token_count,
            importance=importance,
        )

    return _make


@pytest.fixture
def make_query(now: datetime) -> Callable[..., HistoryItem]:
    """Factory for recent user queries."""

    def _make(content: str, token_count: int = 0) -> HistoryItem:
        return HistoryItem(
            content=content,
            role=Role.USER,
            message_type=MessageType.USER_QUERY,
            timestamp=now,
            token_count=token_count,
        )

    return _make
