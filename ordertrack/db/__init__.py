"""
Ordertrack Database Module.

Provides database connection management and repositories for data persistence.
Uses SQLAlchemy Core with PostgreSQL (Cloud SQL Python Connector) or any
SQLAlchemy URL.
"""

from ordertrack.db.connection import DatabaseConnection
from ordertrack.db.unit_of_work import UnitOfWork

__all__ = ["DatabaseConnection", "UnitOfWork"]
