"""
Conversation-manager integration: role/content items in, pruned history out.
"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

from .estimators import CharRatioEstimator
from .exporters import AriadneExporter, ConsoleExporter, NullExporter
from .protocols import Exporter
from .stats import format_report
from .store import BudgetStore
from .types import (
    HistoryItem,
    HistoryStats,
    MessageType,
    PruneConfig,
    PruneError,
    PruneResult,
    ResponseItem,
    Role,
    as_utc,
    utcnow,
)


def classify_message_type(content: str, role: str) -> MessageType:
    """Derive the message type of an external item from its role and content."""
    content_lower = content.lower()

    if role == "system":
        return MessageType.SYSTEM_RESPONSE
    if role == "user":
        if "error" in content_lower or "help" in content_lower:
            return MessageType.ERROR_HANDLING
        if "config" in content_lower or "setting" in content_lower:
            return MessageType.IMPORTANT_DECISION
        return MessageType.USER_QUERY
    if role == "assistant":
        if "```" in content:
            return MessageType.CODE_EXECUTION
        if "important" in content_lower or "warning" in content_lower:
            return MessageType.IMPORTANT_DECISION
        return MessageType.SYSTEM_RESPONSE
    return MessageType.CONTEXTUAL_INFO


def coerce_response_item(obj: Any) -> ResponseItem:
    """
    Normalize a dict, SDK message object or ResponseItem into a ResponseItem.

    Missing roles default to "user" and missing content to the empty string.

    Raises:
        PruneError: If obj is neither a mapping nor carries a ``content`` attribute
    """
    if isinstance(obj, ResponseItem):
        return obj
    if isinstance(obj, dict):
        role = obj.get("role", "user")
        content = obj.get("content", "")
    elif hasattr(obj, "content"):
        role = getattr(obj, "role", "user")
        content = obj.content
    else:
        raise PruneError(
            f"Cannot read a message from {type(obj).__name__}: {obj!r}"
        )
    return ResponseItem(
        role=str(role or "user"),
        content="" if content is None else str(content),
    )


def to_history_item(item: ResponseItem, timestamp: datetime) -> HistoryItem:
    """Build the internal record for an external item."""
    return HistoryItem(
        content=item.content,
        role=Role.parse(item.role),
        message_type=classify_message_type(item.content, item.role),
        timestamp=timestamp,
        meta={"source_role": item.role},
    )


def build_exporter(config: PruneConfig) -> Exporter:
    """Choose the telemetry exporter described by the configuration."""
    if not config.telemetry_enabled:
        return NullExporter()
    if config.ariadne_url:
        return AriadneExporter(ariadne_url=config.ariadne_url)
    return ConsoleExporter()


class ConversationHistory:
    """Token-limited conversation history for a single session."""

    def __init__(
        self,
        max_tokens: Optional[int] = None,
        config: Optional[PruneConfig] = None,
        exporter: Optional[Exporter] = None,
        history_id: str = "default",
    ):
        """
        Initialize history.

        Args:
            max_tokens: Token ceiling; overrides ``config.max_tokens`` when given
            config: Full configuration (default: PruneConfig())
            exporter: Telemetry exporter (default: chosen from config)
            history_id: Identifier attached to emitted events

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        config = config or PruneConfig()
        if max_tokens is not None:
            config = replace(config, max_tokens=max_tokens)
        config.validate()

        self.config = config
        self.store = BudgetStore(
            config.max_tokens,
            policy=config.policy,
            estimator=CharRatioEstimator(config.chars_per_token),
            exporter=exporter or build_exporter(config),
            history_id=history_id,
        )

    @classmethod
    def with_token_limit(cls, max_tokens: int, **kwargs: Any) -> "ConversationHistory":
        """Create a history with a custom token limit."""
        return cls(max_tokens=max_tokens, **kwargs)

    @classmethod
    def from_config(cls, config: PruneConfig, **kwargs: Any) -> "ConversationHistory":
        """Create a history from a loaded configuration."""
        return cls(config=config, **kwargs)

    def record_item(
        self, item: Any, now: Optional[datetime] = None
    ) -> Optional[PruneResult]:
        """Ingest one external item, pruning if the budget is exceeded."""
        now = as_utc(now) if now else utcnow()
        response_item = coerce_response_item(item)
        return self.store.ingest(to_history_item(response_item, now), now)

    def record_items(
        self, items: Iterable[Any], now: Optional[datetime] = None
    ) -> list[PruneResult]:
        """
        Ingest items in order; pruning may run after any of them.

        Returns:
            Results of every pipeline run triggered along the way
        """
        now = now or utcnow()
        results = []
        for item in items:
            result = self.record_item(item, now)
            if result is not None:
                results.append(result)
        return results

    def estimate_tokens(self, items: Iterable[Any]) -> int:
        """Estimated token cost of external items before any pruning."""
        now = utcnow()
        return self.store.estimator.estimate_items_tokens(
            [to_history_item(coerce_response_item(item), now) for item in items]
        )

    def items(self) -> list[ResponseItem]:
        """Surviving items in chronological order."""
        return self.store.export()

    def get_stats(self) -> HistoryStats:
        return self.store.stats()

    def set_min_messages(self, count: int) -> Optional[PruneResult]:
        """Update the message floor and re-prune if over budget."""
        return self.store.set_min_messages(count)

    def keep_last_messages(self, count: int) -> Optional[PruneResult]:
        """Compatibility alias of set_min_messages; non-positive counts are ignored."""
        if count <= 0:
            return None
        return self.set_min_messages(count)

    @classmethod
    def migrate_from_old(
        cls,
        old_items: Iterable[Any],
        batch_size: int = 50,
        **kwargs: Any,
    ) -> "ConversationHistory":
        """
        Build a history by replaying an existing item list in batches.

        Each batch shares one ingest timestamp.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")

        history = cls(**kwargs)
        batch: list[Any] = []
        for item in old_items:
            batch.append(item)
            if len(batch) == batch_size:
                history.record_items(batch)
                batch = []
        if batch:
            history.record_items(batch)
        return history

    def get_migration_report(self) -> str:
        return format_report(self.get_stats(), title="Migration Complete")
