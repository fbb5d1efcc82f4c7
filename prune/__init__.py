"""
Ariadne History Pruning Extension - token-budgeted conversation history
"""

from .types import (
    COMPRESSED_MARKER,
    ConfigurationError,
    HistoryItem,
    HistoryStats,
    MessageType,
    PruneConfig,
    PruneError,
    PrunePolicy,
    PruneResult,
    ResponseItem,
    Role,
)

__version__ = "0.1.0"
__all__ = [
    "BudgetStore",
    "COMPRESSED_MARKER",
    "ConfigurationError",
    "ConversationHistory",
    "HistoryItem",
    "HistoryStats",
    "MessageType",
    "PruneConfig",
    "PruneError",
    "PrunePolicy",
    "PruneResult",
    "ResponseItem",
    "Role",
]

# Lazy imports to avoid circular dependencies
def __getattr__(name: str):  # type: ignore
    if name == "BudgetStore":
        from .store import BudgetStore
        return BudgetStore
    elif name == "ConversationHistory":
        from .history import ConversationHistory
        return ConversationHistory
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
