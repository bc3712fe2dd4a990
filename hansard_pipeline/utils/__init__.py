"""
Utilities package for the Hansard pipeline.

This package contains reusable helpers for:
- Retry logic
- Batched concurrent fan-out
- Deduplication
- Name similarity scoring
"""

from .batching import gather_in_batches
from .dedupe import dedupe_by_key
from .retry import (
    retry_async,
    calculate_backoff,
    is_retryable_error,
    RetryError,
    RETRYABLE_STATUS_CODES,
)
from .similarity import name_similarity

__all__ = [
    "gather_in_batches",
    "dedupe_by_key",
    "retry_async",
    "calculate_backoff",
    "is_retryable_error",
    "RetryError",
    "RETRYABLE_STATUS_CODES",
    "name_similarity",
]
