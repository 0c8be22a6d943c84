"""
Data access layer for TopicLink.

Provides repository classes for CRUD operations on graphs and topics,
plus the two lookups the relatedness engine needs: resolving a topic
inside a graph and listing every topic outside it.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import KnowledgeGraph, Topic

logger = logging.getLogger(__name__)


class GraphRepository:
    """Repository for knowledge graph CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str) -> KnowledgeGraph:
        """Create a new graph."""
        graph = KnowledgeGraph(name=name)
        self.session.add(graph)
        await self.session.flush()
        return graph

    async def get_by_id(self, graph_id: int) -> Optional[KnowledgeGraph]:
        """Get graph by ID."""
        result = await self.session.execute(
            select(KnowledgeGraph).where(KnowledgeGraph.id == graph_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self) -> List[KnowledgeGraph]:
        """Get all graphs, newest first."""
        result = await self.session.execute(
            select(KnowledgeGraph).order_by(KnowledgeGraph.created_at.desc())
        )
        return list(result.scalars().all())

    async def rename(self, graph_id: int, name: str) -> Optional[KnowledgeGraph]:
        """Rename a graph. Returns None if it does not exist."""
        result = await self.session.execute(
            update(KnowledgeGraph)
            .where(KnowledgeGraph.id == graph_id)
            .values(name=name)
        )
        if result.rowcount == 0:
            return None
        return await self.get_by_id(graph_id)

    async def delete(self, graph_id: int) -> bool:
        """Delete a graph; its topics are removed by cascade."""
        result = await self.session.execute(
            delete(KnowledgeGraph).where(KnowledgeGraph.id == graph_id)
        )
        return result.rowcount > 0


class TopicRepository:
    """Repository for topic rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_batch(self, graph_id: int, titles: List[str]) -> List[Topic]:
        """Insert topics for a graph in the given order."""
        topics = [Topic(graph_id=graph_id, title=title) for title in titles]
        self.session.add_all(topics)
        await self.session.flush()
        return topics

    async def get_by_graph(self, graph_id: int) -> List[Topic]:
        """Get all topics of a graph ordered by id."""
        result = await self.session.execute(
            select(Topic).where(Topic.graph_id == graph_id).order_by(Topic.id.asc())
        )
        return list(result.scalars().all())

    async def get_in_graph(self, topic_id: int, graph_id: int) -> Optional[Topic]:
        """Get a topic only if it belongs to the given graph."""
        result = await self.session.execute(
            select(Topic).where(Topic.id == topic_id, Topic.graph_id == graph_id)
        )
        return result.scalar_one_or_none()

    async def get_outside_graph(self, graph_id: int) -> List[Topic]:
        """
        Get every topic that belongs to another graph.

        Ordered by id so that callers aggregating by label see a stable
        "first" row.
        """
        result = await self.session.execute(
            select(Topic).where(Topic.graph_id != graph_id).order_by(Topic.id.asc())
        )
        return list(result.scalars().all())

    async def delete_by_graph(self, graph_id: int) -> int:
        """Delete all topics of a graph. Returns count of deleted rows."""
        result = await self.session.execute(
            delete(Topic).where(Topic.graph_id == graph_id)
        )
        return result.rowcount
