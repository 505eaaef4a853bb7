"""
Base repository with common CRUD operations.

Provides generic database operations that can be inherited by specific repositories.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import Insert, Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Base repository with common CRUD operations.

    Subclasses must implement:
    - table property: Return the SQLAlchemy Table
    - _row_to_model: Convert database row to Pydantic model
    - _model_to_dict: Convert Pydantic model to database dict

    Subclasses set key_column when the primary key is not "id".
    """

    key_column: str = "id"

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def table(self) -> Table:
        """SQLAlchemy table for this repository."""
        pass

    @abstractmethod
    def _row_to_model(self, row: Any) -> ModelT:
        """Convert database row to Pydantic model."""
        pass

    @abstractmethod
    def _model_to_dict(self, model: ModelT) -> dict:
        """Convert Pydantic model to database dict."""
        pass

    @property
    def key(self):
        return self.table.c[self.key_column]

    def _upsert_insert(self) -> Insert:
        """
        Dialect-specific INSERT supporting ON CONFLICT clauses.

        PostgreSQL in production, SQLite for local runs and tests.
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(self.table)
        return postgresql.insert(self.table)

    def get_by_key(self, key: Any) -> ModelT | None:
        """
        Get entity by primary key.

        Args:
            key: Primary key value

        Returns:
            Pydantic model or None if not found
        """
        stmt = select(self.table).where(self.key == key)
        result = self.session.execute(stmt)
        row = result.fetchone()

        if row is None:
            return None

        return self._row_to_model(row)

