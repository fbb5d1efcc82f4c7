"""Token estimators for history pruning."""

from .noop import NoOpEstimator
from .ratio import CharRatioEstimator, estimate_tokens

__all__ = ["CharRatioEstimator", "NoOpEstimator", "estimate_tokens"]
