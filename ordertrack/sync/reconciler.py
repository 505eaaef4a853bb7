"""
Order status reconciliation.

A run pulls pending orders from the order source, queries each order's
logistics status with bounded concurrency and moves orders to DELIVERED or
DELIVERY_FAILED through a guarded update. A failure for one order is written
to the failure ledger and never aborts the run.
"""

import logging
from dataclasses import dataclass
from functools import partial

from ordertrack.config import DEFAULT_SYNC_CONCURRENCY
from ordertrack.errors import OrderNotFoundError, UpstreamSourceUnavailableError
from ordertrack.logistics.client import TrackingClient
from ordertrack.models.logistics import LogisticsStatus, TrackingResult
from ordertrack.models.order import Order, OrderStatus, PendingOrder
from ordertrack.models.sync import SingleSyncResult, SyncStats
from ordertrack.sync.order_source import OrderSourceClient
from ordertrack.sync.order_store import OrderStore
from ordertrack.utils.concurrency import run_bounded

logger = logging.getLogger(__name__)

# Logistics statuses that trigger a transition, and the order status they set
TRANSITIONS = {
    LogisticsStatus.DELIVERED: OrderStatus.DELIVERED,
    LogisticsStatus.DELIVERY_FAILED: OrderStatus.DELIVERY_FAILED,
}


@dataclass
class OrderSyncResult:
    """Per-order result of a reconciliation run."""

    order_id: str
    failed: bool = False
    skipped: bool = False
    new_status: OrderStatus | None = None
    error: str | None = None


class OrderReconciler:
    """
    Reconciles stored order status against live carrier status.

    Usage:
        reconciler = OrderReconciler(order_source, tracking_client, OrderStore(db))
        stats = await reconciler.run()
    """

    def __init__(
        self,
        order_source: OrderSourceClient | None,
        tracking_client: TrackingClient,
        store: OrderStore,
        concurrency_limit: int = DEFAULT_SYNC_CONCURRENCY,
    ):
        self.order_source = order_source
        self.tracking_client = tracking_client
        self.store = store
        self.concurrency_limit = concurrency_limit

    async def run(self) -> SyncStats:
        """
        Execute one reconciliation run.

        Returns:
            Aggregate run statistics

        Raises:
            UpstreamSourceUnavailableError: Pending orders could not be fetched
        """
        if self.order_source is None:
            raise UpstreamSourceUnavailableError("Order source is not configured")

        logger.info("========== Order status sync started ==========")

        pending_orders = await self.order_source.fetch_pending_orders()
        stats = SyncStats(total_orders=len(pending_orders))

        candidates = []
        for order in pending_orders:
            if order.status.is_terminal:
                stats.skipped_count += 1
            else:
                candidates.append(order)

        if not candidates:
            logger.info("No pending orders to sync")
            return stats

        outcomes = await run_bounded(
            [partial(self._reconcile_safely, order) for order in candidates],
            limit=self.concurrency_limit,
        )

        for outcome in outcomes:
            result = outcome.value
            if not outcome.ok or result is None or result.failed:
                stats.fail_count += 1
            elif result.skipped:
                stats.skipped_count += 1
            else:
                stats.success_count += 1
                if result.new_status == OrderStatus.DELIVERED:
                    stats.delivered_count += 1
                elif result.new_status == OrderStatus.DELIVERY_FAILED:
                    stats.failed_delivery_count += 1

        logger.info(
            "========== Order status sync finished ==========",
            extra={"json_fields": stats.model_dump(by_alias=True)},
        )
        return stats

    async def _reconcile_safely(self, pending: PendingOrder) -> OrderSyncResult:
        try:
            return await self._reconcile(pending)
        except Exception as e:
            logger.warning(
                "Order sync failed",
                extra={"json_fields": {"orderId": pending.order_id, "error": str(e)}},
            )
            self._record_failure(
                pending.order_id, pending.waybill_no, pending.courier_code
            )
            return OrderSyncResult(
                order_id=pending.order_id, failed=True, error=str(e)
            )

    async def _reconcile(self, pending: PendingOrder) -> OrderSyncResult:
        mirror, _ = self.store.ensure_order(pending)
        if mirror.status.is_terminal:
            logger.info(
                "Order already in final status, skipped",
                extra={
                    "json_fields": {
                        "orderId": mirror.order_id,
                        "status": mirror.status.value,
                    }
                },
            )
            return OrderSyncResult(order_id=pending.order_id, skipped=True)

        result = await self.tracking_client.query(
            pending.waybill_no, pending.courier_code
        )
        updated = self._apply(pending.order_id, pending.status, result)
        return OrderSyncResult(
            order_id=pending.order_id,
            new_status=updated.status if updated else None,
        )

    def _apply(
        self, order_id: str, observed_status: OrderStatus, result: TrackingResult
    ) -> Order | None:
        """Transition the order if the logistics status is final."""
        target = TRANSITIONS.get(result.status)
        if target is None:
            return None
        return self.store.transition_status(order_id, observed_status, target)

    def _record_failure(self, order_id: str, waybill_no: str, courier_code: str):
        try:
            self.store.record_failure(order_id, waybill_no, courier_code)
        except Exception as e:
            logger.error(
                "Failed to save logistics failure record",
                extra={"json_fields": {"orderId": order_id, "error": str(e)}},
            )

    async def sync_order(self, order_id: str) -> SingleSyncResult:
        """
        Reconcile one locally stored order on demand.

        Args:
            order_id: Order identifier

        Returns:
            SingleSyncResult; synced is False when the order is already final

        Raises:
            OrderNotFoundError: Order is not in the local store
            OrderTrackError: Tracking query failed (also recorded in the ledger)
        """
        order = self.store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        if order.status.is_terminal:
            return SingleSyncResult(
                order_id=order_id,
                synced=False,
                current_status=order.status,
                message=f"Order {order_id} is already in final status: {order.status}",
            )

        try:
            result = await self.tracking_client.query(
                order.waybill_no, order.courier_code
            )
        except Exception:
            self._record_failure(order.order_id, order.waybill_no, order.courier_code)
            raise

        updated = self._apply(order_id, order.status, result)
        return SingleSyncResult(
            order_id=order_id,
            synced=True,
            current_status=updated.status if updated else order.status,
            logistics_status=result.status,
            status_time=result.status_time,
            transitioned=updated is not None,
        )
