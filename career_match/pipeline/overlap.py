"""Permissive token overlap shared by the pre-filter and the fallback scorer.

Two tokens match when either contains the other, case-insensitively, so
"Python" matches "Python 3" and "Data" matches "Data Analysis".
"""

from collections.abc import Iterable


def tokens_match(a: str, b: str) -> bool:
    a_lower = a.lower().strip()
    b_lower = b.lower().strip()
    if not a_lower or not b_lower:
        return False
    return a_lower in b_lower or b_lower in a_lower


def matched_tokens(item_tokens: Iterable[str], user_tokens: Iterable[str]) -> list[str]:
    """Return the item tokens that match at least one user token, in item order."""
    users = list(user_tokens)
    return [token for token in item_tokens if any(tokens_match(token, u) for u in users)]


def overlap_count(item_tokens: Iterable[str], user_tokens: Iterable[str]) -> int:
    return len(matched_tokens(item_tokens, user_tokens))


def equals_any(value: str, candidates: Iterable[str]) -> bool:
    """Case-insensitive membership test."""
    key = value.lower().strip()
    return bool(key) and any(key == c.lower().strip() for c in candidates)
