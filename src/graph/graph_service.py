"""
Graph service for storing knowledge graphs and querying related topics.

Wraps the repositories in short transactional sessions and converts rows
into frontend-friendly dictionaries. Related-topic lookups resolve the
target inside its own graph, fetch candidates from every other graph and
hand both to the pure ranker in `related_topics`.
"""

import logging
from typing import Any, Dict, List, Optional

from src.database.connection import DatabaseManager, get_db_manager
from src.database.repository import GraphRepository, TopicRepository
from src.preprocessing.text_processor import (
    clean_topic_titles,
    dedupe_topic_titles_casefold,
)

from .related_topics import (
    MAX_RELATED_RESULTS,
    MIN_SIMILARITY,
    CandidateTopic,
    RelatedTopicsResult,
    TopicRef,
    rank_related_topics,
)

logger = logging.getLogger(__name__)


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("name is required")
    return name.strip()


class GraphService:
    """Service for graph CRUD and related-topic lookups."""

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        max_related: int = MAX_RELATED_RESULTS,
        min_similarity: float = MIN_SIMILARITY,
    ):
        """
        Initialize graph service.

        Args:
            db_manager: Database manager (defaults to the global instance)
            max_related: Maximum number of related topics per lookup
            min_similarity: Candidates at or below this similarity are ignored
        """
        self.db_manager = db_manager or get_db_manager()
        self.max_related = max_related
        self.min_similarity = min_similarity

    async def create_graph(self, name: Any, topics: Any) -> int:
        """
        Create a graph with its topics.

        Topics are trimmed, blanks dropped and exact duplicates removed.

        Returns:
            ID of the new graph

        Raises:
            ValueError: If the name or topic list is invalid
        """
        graph_name = _validate_name(name)
        if not isinstance(topics, list) or len(topics) < 1:
            raise ValueError("topics must be an array of at least 1 string")

        titles = clean_topic_titles(topics)
        if not titles:
            raise ValueError("need at least 1 non-empty unique topic")

        async with self.db_manager.session() as session:
            graph = await GraphRepository(session).create(graph_name)
            await TopicRepository(session).create_batch(graph.id, titles)
            graph_id = graph.id

        logger.info("Created graph %s ('%s') with %d topics", graph_id, graph_name, len(titles))
        return graph_id

    async def list_graphs(self) -> List[Dict]:
        """List all graphs, newest first."""
        async with self.db_manager.session() as session:
            graphs = await GraphRepository(session).get_all()
            return [g.to_dict() for g in graphs]

    async def get_graph(self, graph_id: int) -> Optional[Dict]:
        """
        Get a graph with its topic nodes.

        Returns:
            {"graph": {...}, "nodes": [{id, title}, ...]} or None if missing
        """
        async with self.db_manager.session() as session:
            graph = await GraphRepository(session).get_by_id(graph_id)
            if graph is None:
                return None
            nodes = await TopicRepository(session).get_by_graph(graph_id)
            return {
                "graph": graph.to_dict(),
                "nodes": [t.to_dict() for t in nodes],
            }

    async def rename_graph(self, graph_id: int, name: Any) -> Optional[Dict]:
        """Rename a graph. Returns None if it does not exist."""
        graph_name = _validate_name(name)
        async with self.db_manager.session() as session:
            graph = await GraphRepository(session).rename(graph_id, graph_name)
            if graph is None:
                return None
            logger.info("Renamed graph %s to '%s'", graph_id, graph_name)
            return graph.to_dict()

    async def replace_topics(self, graph_id: int, topics: Any) -> Optional[List[Dict]]:
        """
        Replace all topics of a graph.

        Titles are de-duplicated case-insensitively, keeping the first casing.

        Returns:
            The new topic nodes, or None if the graph does not exist
        """
        if not isinstance(topics, list) or len(topics) < 1:
            raise ValueError("topics must be a non-empty array")

        titles = dedupe_topic_titles_casefold(topics)

        async with self.db_manager.session() as session:
            graph = await GraphRepository(session).get_by_id(graph_id)
            if graph is None:
                return None

            topic_repo = TopicRepository(session)
            removed = await topic_repo.delete_by_graph(graph_id)
            await topic_repo.create_batch(graph_id, titles)
            nodes = await topic_repo.get_by_graph(graph_id)

        logger.info(
            "Replaced topics of graph %s (%s removed, %d inserted)",
            graph_id,
            removed,
            len(titles),
        )
        return [t.to_dict() for t in nodes]

    async def delete_graph(self, graph_id: int) -> bool:
        """Delete a graph and its topics. Returns False if it does not exist."""
        async with self.db_manager.session() as session:
            deleted = await GraphRepository(session).delete(graph_id)
        if deleted:
            logger.info("Deleted graph %s", graph_id)
        return deleted

    async def get_related_topics(
        self,
        graph_id: int,
        topic_id: int,
    ) -> Optional[RelatedTopicsResult]:
        """
        Rank topics from other graphs by relatedness to one topic.

        Args:
            graph_id: Graph that owns the target topic
            topic_id: Target topic ID

        Returns:
            Ranked result, or None if the topic is not in the graph
        """
        async with self.db_manager.session() as session:
            topic_repo = TopicRepository(session)
            current = await topic_repo.get_in_graph(topic_id, graph_id)
            if current is None:
                logger.warning("Topic %s not found in graph %s", topic_id, graph_id)
                return None

            target = TopicRef(id=current.id, title=current.title)
            rows = await topic_repo.get_outside_graph(graph_id)

        candidates = [
            CandidateTopic(id=row.id, graph_id=row.graph_id, title=row.title)
            for row in rows
        ]
        result = rank_related_topics(
            target,
            candidates,
            max_results=self.max_related,
            min_similarity=self.min_similarity,
        )
        logger.info(
            "Related topics for %s/%s: %d candidates -> %d results",
            graph_id,
            topic_id,
            len(candidates),
            len(result.related),
        )
        return result
