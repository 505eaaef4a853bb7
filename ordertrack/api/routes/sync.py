"""
Order status synchronization API routes.

- Scheduled sync: triggered by a cron job with the shared bearer secret
- Manual sync: reconcile a single order on demand
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ordertrack.api.auth import verify_cron_secret
from ordertrack.api.dependencies import get_reconciler
from ordertrack.errors import InvalidArgumentError, UpstreamSourceUnavailableError
from ordertrack.models.order import LogisticsFailRecord
from ordertrack.models.sync import (
    ManualSyncRequest,
    ManualSyncResponse,
    SyncResponse,
    SyncStats,
)
from ordertrack.sync.reconciler import OrderReconciler

router = APIRouter()
logger = logging.getLogger(__name__)


@router.api_route(
    "/sync-order-status",
    methods=["GET", "POST"],
    response_model=SyncResponse,
    dependencies=[Depends(verify_cron_secret)],
    operation_id="syncOrderStatus",
)
async def sync_order_status(
    reconciler: OrderReconciler = Depends(get_reconciler),
):
    """
    Run one order status reconciliation.

    Per-order failures are recorded in the failure ledger and reflected in
    the stats; the response is still 200.

    Returns:
        Run statistics

    Raises:
        401: Missing or invalid bearer token
        500: Pending orders could not be fetched, the run did not start
    """
    try:
        stats = await reconciler.run()
    except UpstreamSourceUnavailableError as e:
        logger.error("Order status sync task failed: %s", e.message)
        response = SyncResponse(
            success=False,
            message="Order status sync task failed",
            stats=SyncStats(),
        )
        return JSONResponse(
            status_code=500, content=response.model_dump(mode="json", by_alias=True)
        )

    message = (
        "No pending orders to sync"
        if stats.total_orders == 0
        else "Order status sync completed"
    )
    return SyncResponse(success=True, message=message, stats=stats)


@router.get(
    "/sync-failures",
    response_model=list[LogisticsFailRecord],
    dependencies=[Depends(verify_cron_secret)],
    operation_id="listSyncFailures",
)
async def list_sync_failures(
    limit: int = 100,
    reconciler: OrderReconciler = Depends(get_reconciler),
) -> list[LogisticsFailRecord]:
    """List failure ledger entries, most recent first, for manual follow-up."""
    return reconciler.store.list_failures(limit=min(max(limit, 1), 500))


@router.post(
    "/manual-sync",
    response_model=ManualSyncResponse,
    operation_id="manualSync",
)
async def manual_sync(
    request: ManualSyncRequest,
    reconciler: OrderReconciler = Depends(get_reconciler),
) -> ManualSyncResponse:
    """
    Reconcile one order immediately.

    Args:
        request: orderId of a locally stored order

    Returns:
        Current order status and the logistics status that was observed.
        success is false when the order is already in a final status.

    Raises:
        400: orderId missing
        404: Order not found
        502: Tracking query failed
    """
    order_id = (request.order_id or "").strip()
    if not order_id:
        raise InvalidArgumentError("orderId is required")

    result = await reconciler.sync_order(order_id)
    if not result.synced:
        return ManualSyncResponse(success=False, message=result.message, data=result)

    return ManualSyncResponse(
        success=True, message="Manual sync completed", data=result
    )
