"""
Token-budgeted store orchestrating the eviction pipeline.
"""

import logging
from datetime import datetime
from typing import Optional

from .compressor import HeuristicCompressor
from .estimators import CharRatioEstimator
from .exporters import NullExporter
from .policy import EvictionPlanner
from .protocols import Compressor, Exporter, TokenEstimator
from .scoring import calculate_importance
from .stats import build_stats
from .types import (
    ConfigurationError,
    HistoryItem,
    HistoryStats,
    PrunePolicy,
    PruneResult,
    ResponseItem,
    as_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

TIER_COMPRESS = "compress"
TIER_REMOVE = "remove"
TIER_AGGRESSIVE = "aggressive"


class BudgetStore:
    """
    Ordered history of items kept under a fixed token budget.

    Over-budget stores are pruned in three tiers, re-checking the budget after
    each: compress old low-importance items, remove low-importance
    non-essential items, then keep only the highest ranked items. Survivors
    always stay in arrival order.
    """

    def __init__(
        self,
        max_tokens: int,
        policy: Optional[PrunePolicy] = None,
        estimator: Optional[TokenEstimator] = None,
        compressor: Optional[Compressor] = None,
        exporter: Optional[Exporter] = None,
        history_id: str = "default",
    ):
        """
        Initialize store.

        Args:
            max_tokens: Hard token ceiling for the surviving items
            policy: Eviction policy (default: PrunePolicy())
            estimator: Token estimator (default: CharRatioEstimator)
            compressor: Content compressor (default: HeuristicCompressor)
            exporter: Telemetry exporter (default: NullExporter)
            history_id: Identifier attached to emitted events

        Raises:
            ConfigurationError: If max_tokens or the policy is invalid
        """
        if max_tokens < 1:
            raise ConfigurationError("max_tokens must be >= 1")

        policy = policy or PrunePolicy()
        policy.validate()

        self._max_tokens = max_tokens
        self.planner = EvictionPlanner(policy)
        self.estimator = estimator or CharRatioEstimator()
        self.compressor = compressor or HeuristicCompressor(
            min_chars=policy.compress_min_chars
        )
        self.exporter = exporter or NullExporter()
        self.history_id = history_id

        self._items: list[HistoryItem] = []
        self._total_tokens = 0

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    @property
    def total_tokens(self) -> int:
        return self._total_tokens

    @property
    def policy(self) -> PrunePolicy:
        return self.planner.policy

    @property
    def min_messages(self) -> int:
        return self.policy.min_messages

    @property
    def full_retention_count(self) -> int:
        return self.policy.full_retention_count

    def __len__(self) -> int:
        return len(self._items)

    def is_over_budget(self) -> bool:
        return self.planner.check_trigger(self._total_tokens, self._max_tokens)

    def ingest(
        self, item: HistoryItem, now: Optional[datetime] = None
    ) -> Optional[PruneResult]:
        """
        Add an item and prune if the budget is exceeded.

        The store keeps its own copy of ``item``. A token count of zero means
        "not supplied" and is estimated from the content; importance is always
        recomputed relative to ``now``. Naive datetimes are taken to be UTC.

        Args:
            item: Item to append
            now: Reference time for scoring (default: current UTC time)

        Returns:
            PruneResult if the eviction pipeline ran, otherwise None
        """
        now = as_utc(now) if now else utcnow()
        item = item.copy()
        item.timestamp = as_utc(item.timestamp)

        if item.token_count <= 0:
            item.token_count = self.estimator.estimate_tokens(item.content)
        item.importance = calculate_importance(item, now)

        self._items.append(item)
        self._total_tokens += item.token_count

        if not self.is_over_budget():
            return None
        return self.prune()

    def prune(self) -> PruneResult:
        """Run the eviction pipeline until the budget is met or tiers run out."""
        result = PruneResult(
            tokens_before=self._total_tokens,
            messages_before=len(self._items),
        )

        if self.is_over_budget():
            self._compress_old_items(result)
        if self.is_over_budget():
            self._remove_low_importance(result)
        if self.is_over_budget() and self.policy.enable_aggressive_pruning:
            self._aggressive_prune(result)

        result.tokens_after = self._total_tokens
        result.messages_after = len(self._items)

        if result.was_triggered:
            self.exporter.emit_event(
                "prune.completed",
                {
                    "history_id": self.history_id,
                    "tiers_run": result.tiers_run,
                    "tokens_before": result.tokens_before,
                    "tokens_after": result.tokens_after,
                    "messages_before": result.messages_before,
                    "messages_after": result.messages_after,
                    "max_tokens": self._max_tokens,
                    "within_budget": not self.is_over_budget(),
                },
            )
            self.exporter.flush()

        return result

    def _compress_old_items(self, result: PruneResult) -> None:
        """Tier A: replace old, long, low-importance content with a digest."""
        result.tiers_run.append(TIER_COMPRESS)
        tokens_before = self._total_tokens
        bound = self.planner.compression_bound(len(self._items))
        compressed = 0

        for item in self._items[:bound]:
            if not self.planner.should_compress(item):
                continue

            digest, is_noop = self.compressor.compress(item.content)
            # a digest that is not shorter only adds the marker
            if is_noop or len(digest) >= len(item.content):
                continue

            old_tokens = item.token_count
            item.content = digest
            item.token_count = self.estimator.estimate_tokens(digest)
            self._total_tokens = (
                max(0, self._total_tokens - old_tokens) + item.token_count
            )
            compressed += 1

        result.compressed_count += compressed
        logger.debug(
            "compress tier: %d items, %d -> %d tokens",
            compressed,
            tokens_before,
            self._total_tokens,
        )
        self.exporter.emit_event(
            "prune.tier_compress",
            {
                "history_id": self.history_id,
                "eligible": bound,
                "compressed": compressed,
                "tokens_saved": tokens_before - self._total_tokens,
            },
        )

    def _remove_low_importance(self, result: PruneResult) -> None:
        """Tier B: delete low-importance, non-essential items oldest first."""
        result.tiers_run.append(TIER_REMOVE)
        tokens_before = self._total_tokens
        bound = self.planner.removal_bound(len(self._items))
        removed = 0

        i = 0
        while i < bound and self.is_over_budget():
            item = self._items[i]
            if self.planner.should_remove(item):
                del self._items[i]
                self._total_tokens = max(0, self._total_tokens - item.token_count)
                bound -= 1
                removed += 1
                continue
            i += 1

        result.removed_count += removed
        logger.debug(
            "remove tier: %d items, %d -> %d tokens",
            removed,
            tokens_before,
            self._total_tokens,
        )
        self.exporter.emit_event(
            "prune.tier_remove",
            {
                "history_id": self.history_id,
                "removed": removed,
                "tokens_saved": tokens_before - self._total_tokens,
            },
        )

    def _aggressive_prune(self, result: PruneResult) -> None:
        """Tier C: keep only the top ranked items, in chronological order."""
        target_count = self.planner.target_count(self._max_tokens)
        if len(self._items) <= target_count:
            return

        result.tiers_run.append(TIER_AGGRESSIVE)
        tokens_before = self._total_tokens
        count_before = len(self._items)

        keep = self.planner.select_survivors(self._items, target_count)
        self._items = [self._items[i] for i in keep]
        self._total_tokens = sum(item.token_count for item in self._items)

        dropped = count_before - len(self._items)
        result.aggressive_dropped += dropped
        logger.debug(
            "aggressive tier: kept %d of %d items, %d -> %d tokens",
            len(self._items),
            count_before,
            tokens_before,
            self._total_tokens,
        )
        self.exporter.emit_event(
            "prune.tier_aggressive",
            {
                "history_id": self.history_id,
                "target_count": target_count,
                "dropped": dropped,
                "tokens_saved": tokens_before - self._total_tokens,
            },
        )

    def set_min_messages(self, count: int) -> Optional[PruneResult]:
        """
        Change the message floor and prune again if over budget.

        Raises:
            ConfigurationError: If count < 1
        """
        self.planner = EvictionPlanner(self.planner.with_min_messages(count))
        if not self.is_over_budget():
            return None
        return self.prune()

    def snapshot(self) -> list[HistoryItem]:
        """Copies of the surviving items in chronological order."""
        return [item.copy() for item in self._items]

    def export(self) -> list[ResponseItem]:
        """Surviving items projected onto the external role/content shape."""
        return [item.to_response_item() for item in self._items]

    def stats(self) -> HistoryStats:
        """Summary counters for the current contents."""
        return build_stats(
            self._items,
            self._total_tokens,
            self._max_tokens,
            self.policy.high_importance_threshold,
        )
