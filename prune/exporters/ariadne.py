"""Ariadne trace viewer exporter."""

import json
import logging
import time
import uuid
from collections import deque
from typing import Any, Optional

import httpx

from ..types import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 500


class AriadneExporter:
    """
    Exports pruning events to Ariadne Trace Viewer via HTTP.

    Events are batched until ``flush``; a failed flush keeps them pending for
    the next attempt. At most ``max_pending`` events are held; the oldest are
    dropped first.
    """

    def __init__(
        self,
        ariadne_url: str = "http://localhost:5175/ingest",
        trace_id: Optional[str] = None,
        timeout: float = 2.0,
        http_client: Optional[httpx.Client] = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        """
        Initialize Ariadne exporter.

        Args:
            ariadne_url: Ariadne API endpoint
            trace_id: Trace ID for all events (auto-generated if not provided)
            timeout: HTTP request timeout in seconds
            http_client: Preconfigured client (default: a new httpx.Client)
            max_pending: Largest number of events held between flushes

        Raises:
            ConfigurationError: If max_pending < 1
        """
        if max_pending < 1:
            raise ConfigurationError("max_pending must be >= 1")

        self.ariadne_url = ariadne_url
        self.trace_id = trace_id or f"history-{uuid.uuid4().hex[:12]}"
        self.timeout = timeout
        self.pending_events: deque[dict[str, Any]] = deque(maxlen=max_pending)
        self.dropped_events = 0
        self.http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout)
        )

    def emit_event(
        self,
        event_type: str,
        properties: dict[str, Any],
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        """Queue an event as an Ariadne span."""
        event = {
            "type": "span",
            "trace_id": self.trace_id,
            "span_id": f"prune-{uuid.uuid4().hex[:8]}",
            "name": event_type,
            "timestamp": time.time(),
            "properties": properties,
        }

        if payload:
            event["payload"] = json.dumps(payload)

        if len(self.pending_events) == self.pending_events.maxlen:
            self.dropped_events += 1
        self.pending_events.append(event)

    def flush(self) -> None:
        """Batch and send all pending events to Ariadne."""
        if not self.pending_events:
            return

        try:
            response = self.http_client.post(
                self.ariadne_url,
                json={"events": list(self.pending_events)},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                "Failed to export %d events (%d dropped so far): %s",
                len(self.pending_events),
                self.dropped_events,
                e,
            )
            return

        self.pending_events.clear()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.http_client.close()

    def __enter__(self) -> "AriadneExporter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.flush()
        self.close()
