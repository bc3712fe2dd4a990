"""
Normalized edit-distance similarity for speaker names.

Responsibility: Score how close an observed speaker name is to a
registry display name.
"""

from rapidfuzz.distance import Levenshtein


def name_similarity(first: str, second: str) -> float:
    """
    Similarity in [0.0, 1.0] based on Levenshtein distance.

    ``1 - distance / max(len(first), len(second))``; two empty strings are
    identical (1.0). The function is symmetric and case-sensitive, so
    callers lower-case both sides before comparing names.
    """
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(first, second) / longest
