"""
Fuzzy textual similarity between two topic titles.

A cheap, explainable heuristic biased towards the prefix and containment
relationships typical of topic phrases. Both inputs are compacted first
(lower-cased, whitespace removed), so "Spider Man" and "spiderman" match
exactly.
"""

from src.preprocessing.text_processor import compact_text


def common_prefix_length(a: str, b: str) -> int:
    """Number of leading characters shared by `a` and `b`."""
    length = 0
    for ch_a, ch_b in zip(a, b):
        if ch_a != ch_b:
            break
        length += 1
    return length


def similarity_score(a: str, b: str) -> float:
    """
    Similarity of two titles in [0, 1].

    Branches, in order:
    1. either compact form empty -> 0
    2. identical compact forms -> 1
    3. shorter contained in longer -> len(shorter) / len(longer)
    4. otherwise -> common prefix length / len(longer)

    Args:
        a: First title
        b: Second title

    Returns:
        Similarity score (unrounded)
    """
    compact_a = compact_text(a)
    compact_b = compact_text(b)

    if not compact_a or not compact_b:
        return 0.0

    if compact_a == compact_b:
        return 1.0

    # Ties keep `a` as the longer string
    if len(compact_a) >= len(compact_b):
        longer, shorter = compact_a, compact_b
    else:
        longer, shorter = compact_b, compact_a

    if shorter in longer:
        return len(shorter) / len(longer)

    return common_prefix_length(shorter, longer) / len(longer)
