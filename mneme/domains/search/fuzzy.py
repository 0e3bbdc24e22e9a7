"""
Fuzzy Matching - Edit distance and per-field similarity scoring.

Features:
- Levenshtein distance over Unicode code points
- Best-substring edit distance for typo-tolerant containment
- Integer similarity score (exact > substring > fuzzy > none)

Scoring constants live at module level so relevance can be tuned
without touching the ranking loop.
"""

from __future__ import annotations

__all__ = [
    "EXACT_MATCH_SCORE",
    "FUZZY_BASE_SCORE",
    "SUBSTRING_BASE_SCORE",
    "calculate_similarity",
    "fuzzy_tolerance",
    "levenshtein",
    "substring_distance",
]

# Exact (case-insensitive, trimmed) match
EXACT_MATCH_SCORE = 10

# Substring containment: base + scale * len(term) // len(text), range 5..9
SUBSTRING_BASE_SCORE = 5
SUBSTRING_SCALE = 4

# Fuzzy substring match: base - distance, always below SUBSTRING_BASE_SCORE
FUZZY_BASE_SCORE = 5
FUZZY_MIN_TERM_LENGTH = 4
FUZZY_MAX_TERM_LENGTH = 64
FUZZY_MIN_TOLERANCE = 1
FUZZY_MAX_TOLERANCE = 3
FUZZY_TOLERANCE_DIVISOR = 4


def levenshtein(a: str, b: str) -> int:
    """
    Minimum number of single-character edits turning ``a`` into ``b``.

    Case-sensitive; callers lower-case first when they want otherwise.

    Example:
        >>> levenshtein("auth", "auths")
        1
    """
    # dp[i][j] = distance between a[:i] and b[:j]
    dp = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) + 1):
        dp[i][0] = i
    for j in range(len(b) + 1):
        dp[0][j] = j

    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1])

    return dp[len(a)][len(b)]


def substring_distance(term: str, text: str) -> int:
    """
    Smallest edit distance between ``term`` and any substring of ``text``.

    Same recurrence as :func:`levenshtein` with ``text`` on the free axis:
    a match may start and end anywhere in ``text``.
    """
    if not term:
        return 0

    previous = [0] * (len(text) + 1)
    for i in range(1, len(term) + 1):
        current = [i] + [0] * len(text)
        for j in range(1, len(text) + 1):
            if term[i - 1] == text[j - 1]:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(previous[j], current[j - 1], previous[j - 1])
        previous = current

    return min(previous)


def fuzzy_tolerance(term: str) -> int:
    """Maximum edit distance accepted for a fuzzy match of ``term``."""
    return min(
        FUZZY_MAX_TOLERANCE,
        max(FUZZY_MIN_TOLERANCE, len(term) // FUZZY_TOLERANCE_DIVISOR),
    )


def calculate_similarity(text: str, term: str) -> int:
    """
    Score how well one field text matches one search term.

    Args:
        text: Field text
        term: Search term (one member of an expansion set)

    Returns:
        ``EXACT_MATCH_SCORE`` for an exact match, 5-9 when ``term`` occurs
        in ``text`` (longer terms score higher), 1-4 for a near miss within
        the edit-distance tolerance, otherwise 0.
    """
    text = text.strip().lower()
    term = term.strip().lower()
    if not term or not text:
        return 0

    if text == term:
        return EXACT_MATCH_SCORE

    if term in text:
        scaled = SUBSTRING_BASE_SCORE + SUBSTRING_SCALE * len(term) // len(text)
        return min(EXACT_MATCH_SCORE - 1, scaled)

    if not FUZZY_MIN_TERM_LENGTH <= len(term) <= FUZZY_MAX_TERM_LENGTH:
        return 0

    distance = substring_distance(term, text)
    if distance <= fuzzy_tolerance(term):
        return max(1, FUZZY_BASE_SCORE - distance)

    return 0
