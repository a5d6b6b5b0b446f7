"""Relational metadata catalog."""

from indexify.persistence.database import Base, create_db_engine
from indexify.persistence.models import IndexEntity
from indexify.persistence.repository import Repository

__all__ = [
    "Base",
    "IndexEntity",
    "Repository",
    "create_db_engine",
]
