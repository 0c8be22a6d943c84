"""
Cross-graph topic relatedness ranking.

Given a target topic and the topics of all other graphs, computes the
similarity of each candidate once, groups candidates by normalized label,
and returns the best labels ordered by score (best similarity multiplied by
the number of occurrences).

Everything here is a pure function over in-memory values; the caller
resolves the target and supplies candidates in a stable order (ascending
id), which makes "first seen wins" for representative titles reproducible.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from src.graph.similarity import similarity_score
from src.preprocessing.text_processor import normalize_label

logger = logging.getLogger(__name__)

MAX_RELATED_RESULTS = 20
MIN_SIMILARITY = 0.0
SCORE_DECIMALS = 4


class InvalidInputError(ValueError):
    """Raised when the ranker is called with a malformed target or candidate pool."""


@dataclass(frozen=True)
class TopicRef:
    """Resolved target topic."""

    id: int
    title: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title}


@dataclass(frozen=True)
class CandidateTopic:
    """A topic from a graph other than the target's."""

    id: int
    graph_id: int
    title: str


@dataclass
class TopicAggregate:
    """Statistics for all candidates sharing one normalized label."""

    id: int
    title: str
    occurrences: int
    max_similarity: float

    @property
    def raw_score(self) -> float:
        return self.max_similarity * self.occurrences


@dataclass(frozen=True)
class RelatedTopic:
    """One result row, with display-rounded values."""

    id: int
    title: str
    occurrences: int
    similarity: float
    score: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "occurrences": self.occurrences,
            "similarity": self.similarity,
            "score": self.score,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class RelatedTopicsResult:
    topic: TopicRef
    related: List[RelatedTopic]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic.to_dict(),
            "related": [row.to_dict() for row in self.related],
        }


def build_reason(max_similarity: float, occurrences: int) -> str:
    """Human-readable explanation for a result row."""
    if max_similarity == 1:
        return f"identical match found in {occurrences} other graph(s)"
    return (
        f"partial match; best similarity={max_similarity:.2f} "
        f"found in {occurrences} other graph(s)"
    )


def aggregate_candidates(
    target_title: str,
    candidates: Iterable[CandidateTopic],
    min_similarity: float = MIN_SIMILARITY,
) -> Dict[str, TopicAggregate]:
    """
    Group candidates with positive signal by normalized label.

    Args:
        target_title: Title to compare against
        candidates: Candidate topics in caller-defined order
        min_similarity: Candidates scoring at or below this are dropped

    Returns:
        Insertion-ordered mapping of normalized label -> aggregate
    """
    aggregates: Dict[str, TopicAggregate] = {}

    for candidate in candidates:
        if candidate is None or not isinstance(candidate.title, str):
            raise InvalidInputError("candidate title must be a string")

        sim = similarity_score(target_title, candidate.title)
        if sim <= min_similarity:
            continue

        key = normalize_label(candidate.title)
        existing = aggregates.get(key)
        if existing is None:
            aggregates[key] = TopicAggregate(
                id=candidate.id,
                title=candidate.title,
                occurrences=1,
                max_similarity=sim,
            )
        else:
            existing.occurrences += 1
            if sim > existing.max_similarity:
                existing.max_similarity = sim

    return aggregates


def to_related_topic(aggregate: TopicAggregate) -> RelatedTopic:
    return RelatedTopic(
        id=aggregate.id,
        title=aggregate.title,
        occurrences=aggregate.occurrences,
        similarity=round(aggregate.max_similarity, SCORE_DECIMALS),
        score=round(aggregate.raw_score, SCORE_DECIMALS),
        reason=build_reason(aggregate.max_similarity, aggregate.occurrences),
    )


def rank_related_topics(
    target: TopicRef,
    candidates: Optional[Iterable[CandidateTopic]],
    max_results: int = MAX_RELATED_RESULTS,
    min_similarity: float = MIN_SIMILARITY,
) -> RelatedTopicsResult:
    """
    Rank topics from other graphs by relatedness to `target`.

    Rows are sorted by score, then similarity, both descending and compared
    on exact (unrounded) values. The sort is stable, so exact ties keep the
    order in which their labels were first seen.

    Args:
        target: Resolved target topic
        candidates: Topics from other graphs, ordered by id
        max_results: Maximum number of rows to return
        min_similarity: Candidates scoring at or below this are dropped

    Returns:
        The target and its related topics

    Raises:
        InvalidInputError: If the target, its title or the candidate pool is missing
    """
    if target is None or not isinstance(target.title, str):
        raise InvalidInputError("target topic title must be a string")
    if candidates is None:
        raise InvalidInputError("candidates must not be None")
    if max_results < 0:
        raise InvalidInputError("max_results must be non-negative")

    aggregates = aggregate_candidates(target.title, candidates, min_similarity)

    ranked = sorted(
        aggregates.values(),
        key=lambda agg: (agg.raw_score, agg.max_similarity),
        reverse=True,
    )
    related = [to_related_topic(agg) for agg in ranked[:max_results]]

    logger.debug(
        "Ranked %d related labels for topic %s (%d returned)",
        len(aggregates),
        target.id,
        len(related),
    )
    return RelatedTopicsResult(topic=target, related=related)
