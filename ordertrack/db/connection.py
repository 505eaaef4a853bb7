"""
Database connection management.

Supports a plain SQLAlchemy URL or Cloud SQL via the Cloud SQL Python Connector
with IAM authentication. Connections are explicit instances created at process
start and closed at shutdown.
"""

from google.cloud.sql.connector import Connector
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ordertrack.db.tables import metadata


class DatabaseConnection:
    """
    Owns a SQLAlchemy engine and session factory.

    Usage:
        # At app startup
        db = DatabaseConnection.from_url(settings.database_url)

        # Use sessions through a unit of work
        with UnitOfWork(db) as uow:
            uow.orders.get_by_order_id(order_id)

        # At app shutdown
        db.close()
    """

    def __init__(self, engine: Engine, connector: Connector | None = None):
        self._engine: Engine | None = engine
        self._connector = connector
        self._session_factory: sessionmaker | None = sessionmaker(bind=engine)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "DatabaseConnection":
        """
        Create a connection from a SQLAlchemy database URL.

        Args:
            url: Database URL (e.g. postgresql+pg8000://...)
            **engine_kwargs: Extra create_engine() arguments (pool settings)
        """
        engine_kwargs.setdefault("pool_pre_ping", True)
        return cls(create_engine(url, **engine_kwargs))

    @classmethod
    def from_cloud_sql(
        cls,
        instance_connection_name: str,
        db_name: str,
        db_user: str | None,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
    ) -> "DatabaseConnection":
        """
        Create a pooled connection to a Cloud SQL instance with IAM auth.

        Args:
            instance_connection_name: Cloud SQL instance (project:region:instance)
            db_name: Database name
            db_user: Database user (service account email for IAM auth)
            pool_size: Base connection pool size
            max_overflow: Additional connections allowed beyond pool_size
            pool_timeout: Seconds to wait for a connection
            pool_recycle: Recycle connections after this many seconds
        """
        if not db_user:
            raise ValueError(
                "DB_USER environment variable is required. "
                "Should be service account email for IAM auth."
            )

        connector = Connector()

        def getconn():
            return connector.connect(
                instance_connection_name,
                "pg8000",
                user=db_user,
                db=db_name,
                enable_iam_auth=True,
            )

        engine = create_engine(
            "postgresql+pg8000://",
            creator=getconn,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,  # Verify connections before use
        )
        return cls(engine, connector=connector)

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            raise RuntimeError("Database connection is closed")
        return self._engine

    def create_schema(self):
        """Create all tables that do not exist yet (local development, tests)."""
        metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """
        Get a new database session.

        The caller is responsible for committing/rolling back and closing the session.
        UnitOfWork manages this lifecycle.
        """
        if self._session_factory is None:
            raise RuntimeError("Database connection is closed")
        return self._session_factory()

    def close(self):
        """Dispose the connection pool and connector."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

        if self._connector:
            self._connector.close()
            self._connector = None

        self._session_factory = None
