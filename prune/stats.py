"""Read-only statistics over a history's surviving items."""

from typing import Iterable

from .types import HistoryItem, HistoryStats


def build_stats(
    items: Iterable[HistoryItem],
    total_tokens: int,
    max_tokens: int,
    high_importance_threshold: float = 0.7,
) -> HistoryStats:
    """Derive summary counters from the current items."""
    total_messages = 0
    compressed = 0
    high_importance = 0
    for item in items:
        total_messages += 1
        if item.compressed:
            compressed += 1
        if item.importance > high_importance_threshold:
            high_importance += 1

    return HistoryStats(
        total_messages=total_messages,
        total_tokens=total_tokens,
        max_tokens=max_tokens,
        utilization_percentage=total_tokens * 100 // max_tokens,
        compressed_messages=compressed,
        high_importance_messages=high_importance,
    )


def format_report(stats: HistoryStats, title: str = "History Statistics") -> str:
    """Render stats as a multi-line human-readable report."""
    lines = [
        f"{title}:",
        f"  Total messages: {stats.total_messages}",
        f"  Total tokens: {stats.total_tokens}",
        f"  Max tokens: {stats.max_tokens}",
        f"  Utilization: {stats.utilization_percentage}%",
        f"  Compressed messages: {stats.compressed_messages}",
        f"  High importance: {stats.high_importance_messages}",
    ]
    return "\n".join(lines)
