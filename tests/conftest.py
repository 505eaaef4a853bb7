"""
pytest configuration and fixtures.

Loads environment variables from .env file for all tests and provides an
in-memory SQLite database for repository and store tests.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ordertrack.db import DatabaseConnection


def pytest_configure(config):
    """Load .env file before running tests"""
    # Find the project root (where .env is located)
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"

    if env_file.exists():
        print(f"Loading environment from {env_file}")
        load_dotenv(env_file)
    else:
        print(f"Warning: .env file not found at {env_file}")


@pytest.fixture
def db():
    """Fresh in-memory SQLite database with the schema created."""
    engine = create_engine(
        "sqlite+pysqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    connection = DatabaseConnection(engine)
    connection.create_schema()
    yield connection
    connection.close()
