"""Character-ratio token estimation."""

import math
from typing import Sequence

from ..types import ConfigurationError, HistoryItem

DEFAULT_CHARS_PER_TOKEN = 3.5


def estimate_tokens(text: str, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> int:
    """Estimate tokens as ceil(len(text) / chars_per_token); empty text is 0."""
    if not text:
        return 0
    return math.ceil(len(text) / chars_per_token)


class CharRatioEstimator:
    """
    Approximate token estimator using a fixed characters-per-token ratio.

    Deliberately conservative for mixed prose and code: English prose averages
    roughly four characters per token, so 3.5 overestimates slightly.
    """

    def __init__(self, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN):
        """Initialize estimator with a characters-per-token ratio."""
        if chars_per_token <= 0:
            raise ConfigurationError("chars_per_token must be > 0")
        self.chars_per_token = chars_per_token

    def estimate_tokens(self, text: str) -> int:
        """Estimate token count for text."""
        return estimate_tokens(text, self.chars_per_token)

    def estimate_items_tokens(self, items: Sequence[HistoryItem]) -> int:
        """Estimate token count for a sequence of items."""
        return sum(self.estimate_tokens(item.content) for item in items)
