"""
Database module for TopicLink.

Provides PostgreSQL integration for:
- Knowledge graph storage
- Topic rows per graph
- Cross-graph topic lookups
"""

from .models import Base, KnowledgeGraph, Topic
from .connection import DatabaseManager, get_db_manager
from .repository import GraphRepository, TopicRepository

__all__ = [
    "Base",
    "KnowledgeGraph",
    "Topic",
    "DatabaseManager",
    "get_db_manager",
    "GraphRepository",
    "TopicRepository",
]
