"""
Unit of Work pattern for transaction coordination.

Provides a clean way to work with multiple repositories within a single transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ordertrack.db.repositories.fail_record import LogisticsFailRecordRepository
from ordertrack.db.repositories.order import OrderRepository
from ordertrack.db.repositories.status_log import OrderStatusLogRepository

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from ordertrack.db.connection import DatabaseConnection


class UnitOfWork:
    """
    Unit of Work for managing database transactions.

    Coordinates multiple repositories within a single transaction,
    ensuring atomic operations with automatic rollback on error.

    Usage:
        with UnitOfWork(db) as uow:
            if uow.orders.transition_status(order_id, old, new):
                uow.status_logs.append(order_id, old, new)
            uow.commit()  # Explicit commit

        # Auto-rollback on exception:
        with UnitOfWork(db) as uow:
            uow.fail_records.record_failure(order_id, waybill_no, courier_code)
            raise Exception("Something went wrong")
            # Transaction is automatically rolled back
    """

    def __init__(self, db: DatabaseConnection):
        self._db = db
        self._session: Session | None = None
        self._orders: OrderRepository | None = None
        self._status_logs: OrderStatusLogRepository | None = None
        self._fail_records: LogisticsFailRecordRepository | None = None

    def __enter__(self) -> UnitOfWork:
        self._session = self._db.get_session()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.rollback()
        self._close()
        return False  # Don't suppress exceptions

    @property
    def session(self) -> Session:
        """Get current session (raises if not in context)."""
        if self._session is None:
            raise RuntimeError("UnitOfWork must be used within a context manager")
        return self._session

    @property
    def orders(self) -> OrderRepository:
        """Order repository for this unit of work."""
        if self._orders is None:
            self._orders = OrderRepository(self.session)
        return self._orders

    @property
    def status_logs(self) -> OrderStatusLogRepository:
        """Status transition log repository for this unit of work."""
        if self._status_logs is None:
            self._status_logs = OrderStatusLogRepository(self.session)
        return self._status_logs

    @property
    def fail_records(self) -> LogisticsFailRecordRepository:
        """Failure ledger repository for this unit of work."""
        if self._fail_records is None:
            self._fail_records = LogisticsFailRecordRepository(self.session)
        return self._fail_records

    def commit(self):
        """Commit the current transaction."""
        self.session.commit()

    def rollback(self):
        """Rollback the current transaction."""
        self.session.rollback()

    def _close(self):
        """Close the session."""
        if self._session is not None:
            self._session.close()
            self._session = None
            self._orders = None
            self._status_logs = None
            self._fail_records = None
