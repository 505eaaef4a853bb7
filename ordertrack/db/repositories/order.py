"""
Order repository for database operations.

Handles the local order mirror, including the guarded status transition used
by reconciliation.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Table, select, update

from ordertrack.db.repositories.base import BaseRepository
from ordertrack.db.tables import orders
from ordertrack.models.order import Order, OrderStatus


class OrderRepository(BaseRepository[Order]):
    """Repository for Order operations keyed by order_id."""

    key_column = "order_id"

    @property
    def table(self) -> Table:
        return orders

    def _row_to_model(self, row: Any) -> Order:
        """Convert database row to Order model."""
        return Order(
            order_id=row.order_id,
            waybill_no=row.waybill_no,
            courier_code=row.courier_code,
            status=OrderStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _model_to_dict(self, model: Order) -> dict:
        """Convert Order model to database dict."""
        now = datetime.now(timezone.utc)
        return {
            "order_id": model.order_id,
            "waybill_no": model.waybill_no,
            "courier_code": model.courier_code,
            "status": model.status.value,
            "created_at": now,
            "updated_at": now,
        }

    def get_by_order_id(self, order_id: str) -> Order | None:
        return self.get_by_key(order_id)

    def create_if_absent(self, order: Order) -> bool:
        """
        Insert the order unless a record with the same order_id exists.

        Args:
            order: Order to insert

        Returns:
            True if a new record was created
        """
        stmt = (
            self._upsert_insert()
            .values(**self._model_to_dict(order))
            .on_conflict_do_nothing(index_elements=[self.table.c.order_id])
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0

    def transition_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
    ) -> bool:
        """
        Conditionally update an order's status.

        The update applies only while the stored status still equals
        expected_status, so a concurrent writer that already moved the order
        turns this call into a no-op.

        Args:
            order_id: Order identifier
            expected_status: Status the caller observed
            new_status: Status to set

        Returns:
            True if the row was updated, False on status mismatch or missing order
        """
        stmt = (
            update(self.table)
            .where(
                self.table.c.order_id == order_id,
                self.table.c.status == expected_status.value,
            )
            .values(status=new_status.value, updated_at=datetime.now(timezone.utc))
        )
        result = self.session.execute(stmt)
        return result.rowcount > 0
