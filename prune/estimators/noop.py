"""No-operation token estimator for testing."""

from typing import Sequence

from ..types import HistoryItem


class NoOpEstimator:
    """Token estimator that returns fixed values for testing."""

    def __init__(self, default_tokens: int = 100):
        """Initialize with default token count."""
        self.default_tokens = default_tokens

    def estimate_tokens(self, text: str) -> int:
        """Always return default tokens."""
        return self.default_tokens

    def estimate_items_tokens(self, items: Sequence[HistoryItem]) -> int:
        """Return default tokens per item."""
        return len(items) * self.default_tokens
