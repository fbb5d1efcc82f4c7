"""
Heuristic content compression for old, low-importance items.
"""

from typing import Sequence

from .types import COMPRESSED_MARKER

KEY_TERMS = ("error", "function", "variable", "config", "solution", "result")
SENTENCE_BREAK = ". "


class HeuristicCompressor:
    """Reduces text to its first sentence plus tags for notable technical terms."""

    def __init__(
        self,
        min_chars: int = 200,
        key_terms: Sequence[str] = KEY_TERMS,
        marker: str = COMPRESSED_MARKER,
    ):
        """
        Initialize compressor.

        Args:
            min_chars: Text at or below this length is returned unchanged
            key_terms: Terms tagged in the digest, checked in this order
            marker: Trailing tag identifying compressed content
        """
        self.min_chars = min_chars
        self.key_terms = tuple(term.lower() for term in key_terms)
        self.marker = marker

    def compress(self, text: str) -> tuple[str, bool]:
        """
        Compress text into a short digest.

        Returns:
            (digest, is_noop); is_noop is True when text is short enough or
            already carries the compression marker, in which case the digest
            is the text itself.
        """
        if len(text) <= self.min_chars or self.marker in text:
            return text, True

        text_lower = text.lower()
        digest = text.split(SENTENCE_BREAK, 1)[0]

        for term in self.key_terms:
            if term in text_lower and term not in digest.lower():
                digest += f" [Contains: {term}]"

        digest += f" {self.marker}"
        return digest, False


def create_summary(text: str, min_chars: int = 200) -> str:
    """Convenience wrapper returning only the digest."""
    digest, _ = HeuristicCompressor(min_chars=min_chars).compress(text)
    return digest
