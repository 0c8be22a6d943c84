"""
Knowledge graph services for TopicLink.

This module provides graph storage operations and the cross-graph topic
relatedness engine (similarity metric and ranker).
"""

from .related_topics import (
    CandidateTopic,
    InvalidInputError,
    RelatedTopic,
    RelatedTopicsResult,
    TopicRef,
    rank_related_topics,
)
from .similarity import similarity_score

__all__ = [
    "CandidateTopic",
    "InvalidInputError",
    "RelatedTopic",
    "RelatedTopicsResult",
    "TopicRef",
    "rank_related_topics",
    "similarity_score",
]
