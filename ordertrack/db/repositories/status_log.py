"""
Order status log repository.

Append-only transition history; rows are never updated or deleted.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Table, select

from ordertrack.db.repositories.base import BaseRepository
from ordertrack.db.tables import order_status_logs
from ordertrack.models.order import OrderStatus, OrderStatusLog


class OrderStatusLogRepository(BaseRepository[OrderStatusLog]):
    """Repository for OrderStatusLog entries."""

    @property
    def table(self) -> Table:
        return order_status_logs

    def _row_to_model(self, row: Any) -> OrderStatusLog:
        return OrderStatusLog(
            id=str(row.id),
            order_id=row.order_id,
            old_status=OrderStatus(row.old_status),
            new_status=OrderStatus(row.new_status),
            created_at=row.created_at,
        )

    def _model_to_dict(self, model: OrderStatusLog) -> dict:
        return {
            "id": UUID(model.id) if model.id else uuid4(),
            "order_id": model.order_id,
            "old_status": model.old_status.value,
            "new_status": model.new_status.value,
            "created_at": model.created_at,
        }

    def append(
        self,
        order_id: str,
        old_status: OrderStatus,
        new_status: OrderStatus,
    ) -> OrderStatusLog:
        """Record one applied transition."""
        entry = OrderStatusLog(
            id=str(uuid4()),
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            created_at=datetime.now(timezone.utc),
        )
        self.session.execute(self.table.insert().values(**self._model_to_dict(entry)))
        return entry

    def list_for_order(self, order_id: str) -> list[OrderStatusLog]:
        """Get transitions for an order, oldest first."""
        stmt = (
            select(self.table)
            .where(self.table.c.order_id == order_id)
            .order_by(self.table.c.created_at.asc())
        )
        result = self.session.execute(stmt)
        return [self._row_to_model(row) for row in result.fetchall()]
