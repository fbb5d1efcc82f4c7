"""
Service Provider Interface (SPI) protocols for pluggable components.
"""

from typing import Any, Protocol, Sequence

from .types import HistoryItem


class TokenEstimator(Protocol):
    """Protocol for token estimation implementations."""

    def estimate_tokens(self, text: str) -> int:
        """Estimate token count for text."""
        ...

    def estimate_items_tokens(self, items: Sequence[HistoryItem]) -> int:
        """Estimate token count for a sequence of items."""
        ...


class Compressor(Protocol):
    """Protocol for content compression strategies."""

    def compress(self, text: str) -> tuple[str, bool]:
        """Return the digest of text and whether compression was a no-op."""
        ...


class Exporter(Protocol):
    """Protocol for telemetry exporters."""

    def emit_event(
        self,
        event_type: str,
        properties: dict[str, Any],
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Emit a structured event."""
        ...

    def flush(self) -> None:
        """Flush any pending events."""
        ...
