"""
Topic title preprocessing module.
"""

from .text_processor import (
    clean_topic_titles,
    compact_text,
    dedupe_topic_titles_casefold,
    normalize_label,
)

__all__ = [
    "normalize_label",
    "compact_text",
    "clean_topic_titles",
    "dedupe_topic_titles_casefold",
]
