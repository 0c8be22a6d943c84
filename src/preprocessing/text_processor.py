"""
Text preprocessing utilities for topic titles.

- `normalize_label` defines when two titles are the same topic.
- `compact_text` is the space-free form used by the similarity metric.
- `clean_topic_titles` / `dedupe_topic_titles_casefold` prepare user input
  before it is stored.
"""

import logging
import re
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_label(text: str) -> str:
    """
    Canonical form of a title used as the aggregation key.

    Lower-cases, collapses whitespace runs to a single space and trims.

    Examples:
        >>> normalize_label("  Spider   Man ")
        'spider man'
        >>> normalize_label("")
        ''
    """
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def compact_text(text: str) -> str:
    """Normalized label with all spaces removed."""
    return normalize_label(text).replace(" ", "")


def _trimmed_titles(topics: Iterable[Any]) -> List[str]:
    # Non-string entries are treated as blanks
    titles = [t.strip() if isinstance(t, str) else "" for t in topics]
    return [t for t in titles if t]


def clean_topic_titles(topics: Iterable[Any]) -> List[str]:
    """
    Trim titles, drop blanks and remove exact duplicates.

    Input order is preserved; the first occurrence of a duplicate wins.
    """
    return list(dict.fromkeys(_trimmed_titles(topics)))


def dedupe_topic_titles_casefold(topics: Iterable[Any]) -> List[str]:
    """
    Trim titles, drop blanks and remove case-insensitive duplicates.

    The first-seen casing of each title is kept, in first-seen order.
    """
    by_key = {}
    for title in _trimmed_titles(topics):
        by_key.setdefault(title.lower(), title)
    return list(by_key.values())
