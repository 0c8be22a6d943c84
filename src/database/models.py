"""
SQLAlchemy models for the TopicLink database.

A knowledge graph is a named collection of topic titles. Topics belong to
exactly one graph and are removed with it.
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class KnowledgeGraph(Base):
    """
    Named graph of topics.

    Stores only the name and creation time; topics are rows in `topics`.
    """
    __tablename__ = "graphs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    topics = relationship(
        "Topic",
        back_populates="graph",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Topic.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<KnowledgeGraph(id={self.id}, name='{self.name}')>"


class Topic(Base):
    """Single topic node within a graph."""
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    graph_id = Column(
        Integer,
        ForeignKey("graphs.id", ondelete="CASCADE"),
        nullable=False,
    )
    title = Column(Text, nullable=False)

    graph = relationship("KnowledgeGraph", back_populates="topics")

    # Related-topic lookups scan by graph_id
    __table_args__ = (
        Index("idx_topics_graph_id", "graph_id"),
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title}

    def __repr__(self):
        return f"<Topic(id={self.id}, graph_id={self.graph_id}, title='{self.title[:50]}')>"
