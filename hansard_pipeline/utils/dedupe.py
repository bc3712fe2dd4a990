"""
Helpers for dropping duplicate records during ingestion.

Responsibility: Drop repeated records by a key function (e.g. a leaf record
listed under two section groups) and report how many were removed.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
K = TypeVar("K")


def dedupe_by_key(
    records: Iterable[T],
    key_fn: Callable[[T], Optional[K]],
) -> Tuple[List[T], int]:
    """
    Keep the first record for every key, preserving input order.

    Records whose key is ``None`` cannot be identified and are dropped
    without counting as duplicates.

    Args:
        records: Iterable of records to deduplicate.
        key_fn: Function used to compute the deduplication key.

    Returns:
        Tuple of (unique_records, duplicate_count).
    """
    seen: dict[K, T] = {}
    duplicates = 0

    for record in records:
        key = key_fn(record)
        if key is None:
            continue
        if key in seen:
            duplicates += 1
            continue
        seen[key] = record

    return list(seen.values()), duplicates
