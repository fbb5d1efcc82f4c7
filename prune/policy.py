"""
Eviction policy: the pure decisions behind each pruning tier.
"""

from dataclasses import replace
from typing import Sequence

from .scoring import is_essential
from .types import HistoryItem, PrunePolicy

RECENCY_BOOST = 1.0
ESSENTIAL_BOOST = 2.0


class EvictionPlanner:
    """Decides which items each tier may compress, remove or keep."""

    def __init__(self, policy: PrunePolicy):
        """Initialize planner with policy."""
        self.policy = policy

    def check_trigger(self, total_tokens: int, max_tokens: int) -> bool:
        """Return True if the running total exceeds the budget."""
        return total_tokens > max_tokens

    def compression_bound(self, count: int) -> int:
        """Number of leading items eligible for compression."""
        return max(0, count - self.policy.full_retention_count)

    def should_compress(self, item: HistoryItem) -> bool:
        """Long, not yet compressed items below the compression threshold."""
        return (
            not item.compressed
            and len(item.content) > self.policy.compress_min_chars
            and item.importance < self.policy.compression_threshold
        )

    def removal_bound(self, count: int) -> int:
        """Number of leading items eligible for low-importance removal."""
        return max(0, count - self.policy.min_messages)

    def should_remove(self, item: HistoryItem) -> bool:
        """Low-importance items that are not essential."""
        return item.importance < self.policy.removal_threshold and not is_essential(
            item
        )

    def target_count(self, max_tokens: int) -> int:
        """
        Number of items to keep after aggressive pruning.

        Assumes an average of ``tokens_per_message`` tokens per item, capped at
        ``max_aggressive_messages`` and never below ``min_messages``.
        """
        estimated = max_tokens // self.policy.tokens_per_message
        return max(
            self.policy.min_messages,
            min(self.policy.max_aggressive_messages, estimated),
        )

    def retention_score(self, items: Sequence[HistoryItem], index: int) -> float:
        """Composite ranking score: importance plus recency and optional essential boosts."""
        item = items[index]
        score = item.importance
        if index >= len(items) - self.policy.min_messages:
            score += RECENCY_BOOST
        if self.policy.protect_essential_in_aggressive and is_essential(item):
            score += ESSENTIAL_BOOST
        return score

    def select_survivors(
        self, items: Sequence[HistoryItem], target_count: int
    ) -> list[int]:
        """
        Pick the positions to keep during aggressive pruning.

        Ranks by composite score descending with ties broken by position
        (older first), then returns the chosen positions in chronological order.
        """
        if len(items) <= target_count:
            return list(range(len(items)))

        ranked = sorted(
            range(len(items)),
            key=lambda i: (-self.retention_score(items, i), i),
        )
        return sorted(ranked[:target_count])

    def with_min_messages(self, count: int) -> PrunePolicy:
        """Return a copy of the policy with a new message floor."""
        policy = replace(self.policy, min_messages=count)
        policy.validate()
        return policy
