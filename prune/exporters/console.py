"""Console exporter for structured logging."""

import json
import sys
from typing import Any, Optional, TextIO


class ConsoleExporter:
    """
    Writes pruning events as JSON lines, to stderr by default.

    Events are buffered until ``flush`` so one pipeline run prints as one
    block. Sequence numbers keep counting across flushes.
    """

    def __init__(self, prefix: str = "[Prune]", stream: Optional[TextIO] = None):
        """Initialize console exporter."""
        self.prefix = prefix
        self.stream = stream
        self.pending_events: list[dict[str, Any]] = []
        self._seq = 0

    def emit_event(
        self,
        event_type: str,
        properties: dict[str, Any],
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        """Queue event for the next flush."""
        self._seq += 1
        event = {
            "seq": self._seq,
            "type": event_type,
            "properties": properties,
        }
        if payload:
            event["payload"] = payload

        self.pending_events.append(event)

    def flush(self) -> None:
        """Write all pending events to the stream."""
        if not self.pending_events:
            return

        stream = self.stream or sys.stderr
        stream.write(
            "".join(
                f"{self.prefix} {json.dumps(event, sort_keys=True)}\n"
                for event in self.pending_events
            )
        )
        stream.flush()
        self.pending_events.clear()


class NullExporter:
    """Discards all events; used when telemetry is disabled."""

    def emit_event(
        self,
        event_type: str,
        properties: dict[str, Any],
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        pass

    def flush(self) -> None:
        pass
