"""
Order store used by reconciliation.

Each operation runs in its own unit of work. The guarded transition writes the
status change and its log entry in one transaction.
"""

import logging

from ordertrack.db import DatabaseConnection, UnitOfWork
from ordertrack.models.order import (
    LogisticsFailRecord,
    Order,
    OrderStatus,
    OrderStatusLog,
    PendingOrder,
)

logger = logging.getLogger(__name__)


class OrderStore:
    """Conditional reads and writes over order mirrors and the failure ledger."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def get_order(self, order_id: str) -> Order | None:
        with UnitOfWork(self.db) as uow:
            return uow.orders.get_by_order_id(order_id)

    def ensure_order(self, pending: PendingOrder) -> tuple[Order, bool]:
        """
        Create the local mirror of an upstream order if it does not exist.

        Args:
            pending: Order as reported by the order source

        Returns:
            Tuple of (stored order, created flag)
        """
        with UnitOfWork(self.db) as uow:
            created = uow.orders.create_if_absent(
                Order(
                    order_id=pending.order_id,
                    waybill_no=pending.waybill_no,
                    courier_code=pending.courier_code,
                    status=pending.status,
                )
            )
            uow.commit()
            order = uow.orders.get_by_order_id(pending.order_id)

        if order is None:
            raise RuntimeError(f"Order {pending.order_id} missing after insert")

        if created:
            logger.info(
                "Created order record",
                extra={"json_fields": {"orderId": order.order_id}},
            )
        return order, created

    def transition_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
    ) -> Order | None:
        """
        Apply a guarded status transition and log it atomically.

        Args:
            order_id: Order identifier
            expected_status: Status observed by the caller
            new_status: Target status

        Returns:
            Updated order, or None when the stored status no longer matched
        """
        with UnitOfWork(self.db) as uow:
            if not uow.orders.transition_status(order_id, expected_status, new_status):
                logger.info(
                    "Order status changed concurrently, transition skipped",
                    extra={
                        "json_fields": {
                            "orderId": order_id,
                            "expectedStatus": expected_status.value,
                            "newStatus": new_status.value,
                        }
                    },
                )
                return None

            uow.status_logs.append(order_id, expected_status, new_status)
            uow.commit()
            updated = uow.orders.get_by_order_id(order_id)

        logger.info(
            "Order status updated",
            extra={
                "json_fields": {
                    "orderId": order_id,
                    "oldStatus": expected_status.value,
                    "newStatus": new_status.value,
                }
            },
        )
        return updated

    def record_failure(
        self, order_id: str, waybill_no: str, courier_code: str
    ) -> LogisticsFailRecord:
        """Create or increment the failure ledger entry for an order."""
        with UnitOfWork(self.db) as uow:
            record = uow.fail_records.record_failure(order_id, waybill_no, courier_code)
            uow.commit()

        logger.warning(
            "Logistics failure recorded",
            extra={
                "json_fields": {
                    "orderId": order_id,
                    "waybillNo": waybill_no,
                    "failCount": record.fail_count,
                }
            },
        )
        return record

    def get_failure(self, order_id: str) -> LogisticsFailRecord | None:
        with UnitOfWork(self.db) as uow:
            return uow.fail_records.get_by_key(order_id)

    def list_failures(self, limit: int = 100) -> list[LogisticsFailRecord]:
        with UnitOfWork(self.db) as uow:
            return uow.fail_records.list_recent(limit)

    def list_status_logs(self, order_id: str) -> list[OrderStatusLog]:
        with UnitOfWork(self.db) as uow:
            return uow.status_logs.list_for_order(order_id)
