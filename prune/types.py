"""
Core type definitions for the history pruning extension.
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

COMPRESSED_MARKER = "[Compressed]"


class Role(str, Enum):
    """Origin of a conversational turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Map a free-form role string onto a known role."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class MessageType(str, Enum):
    """Category of a turn, used as the primary importance signal."""

    USER_QUERY = "user_query"
    SYSTEM_RESPONSE = "system_response"
    CODE_EXECUTION = "code_execution"
    IMPORTANT_DECISION = "important_decision"
    ERROR_HANDLING = "error_handling"
    CONTEXTUAL_INFO = "contextual_info"


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Make a datetime timezone-aware; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class ResponseItem:
    """A turn as exchanged with the conversation manager: role and content only."""

    role: str
    content: str


@dataclass
class HistoryItem:
    """A stored turn with the derived fields the pruning pipeline relies on."""

    content: str
    role: Role = Role.UNKNOWN
    message_type: MessageType = MessageType.CONTEXTUAL_INFO
    timestamp: datetime = field(default_factory=utcnow)
    token_count: int = 0
    importance: float = 0.0
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def compressed(self) -> bool:
        """True once the content has been replaced by a compression digest."""
        return COMPRESSED_MARKER in self.content

    def copy(self) -> "HistoryItem":
        """Independent copy, including the meta mapping."""
        return replace(self, meta=dict(self.meta))

    def to_response_item(self) -> ResponseItem:
        """Project back onto the external role/content shape."""
        role = self.meta.get("source_role") or self.role.value
        return ResponseItem(role=role, content=self.content)


@dataclass
class PrunePolicy:
    """Thresholds and switches for the eviction pipeline."""

    min_messages: int = 10
    full_retention_count: int = 20
    compress_min_chars: int = 200
    compression_threshold: float = 0.7
    removal_threshold: float = 0.3
    high_importance_threshold: float = 0.7
    tokens_per_message: int = 1000
    max_aggressive_messages: int = 50
    enable_aggressive_pruning: bool = True
    protect_essential_in_aggressive: bool = False

    def validate(self) -> None:
        """Validate policy constraints."""
        if self.min_messages < 1:
            raise ConfigurationError("min_messages must be >= 1")
        if self.full_retention_count < 0:
            raise ConfigurationError("full_retention_count must be >= 0")
        if self.compress_min_chars < 0:
            raise ConfigurationError("compress_min_chars must be >= 0")
        for name in (
            "compression_threshold",
            "removal_threshold",
            "high_importance_threshold",
        ):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ConfigurationError(f"{name} must be in range [0.0, 1.0]")
        if self.tokens_per_message < 1:
            raise ConfigurationError("tokens_per_message must be >= 1")
        if self.max_aggressive_messages < 1:
            raise ConfigurationError("max_aggressive_messages must be >= 1")


@dataclass
class PruneConfig:
    """Complete configuration for a conversation history."""

    max_tokens: int = 800_000
    chars_per_token: float = 3.5
    policy: PrunePolicy = field(default_factory=PrunePolicy)
    telemetry_enabled: bool = True
    ariadne_url: Optional[str] = None

    def validate(self) -> None:
        """Validate configuration."""
        if self.max_tokens < 1:
            raise ConfigurationError("max_tokens must be >= 1")
        if self.chars_per_token <= 0:
            raise ConfigurationError("chars_per_token must be > 0")
        self.policy.validate()


@dataclass
class HistoryStats:
    """Summary counters derived from the surviving items."""

    total_messages: int
    total_tokens: int
    max_tokens: int
    utilization_percentage: int
    compressed_messages: int
    high_importance_messages: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PruneResult:
    """Outcome of one run of the eviction pipeline."""

    tokens_before: int = 0
    tokens_after: int = 0
    messages_before: int = 0
    messages_after: int = 0
    compressed_count: int = 0
    removed_count: int = 0
    aggressive_dropped: int = 0
    tiers_run: list[str] = field(default_factory=list)

    @property
    def was_triggered(self) -> bool:
        return bool(self.tiers_run)


class PruneError(Exception):
    """Base exception for pruning errors."""

    pass


class ConfigurationError(PruneError, ValueError):
    """Raised when a store or policy is constructed with invalid settings."""

    pass
