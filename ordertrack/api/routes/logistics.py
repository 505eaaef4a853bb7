"""
Logistics query API routes.

Single and batch waybill status lookups. Batch lookups run through the
bounded-concurrency runner so the tracking provider sees at most a few
requests at a time.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import partial

from fastapi import APIRouter, Depends

from ordertrack.api.dependencies import get_settings, get_tracking_client
from ordertrack.config import Settings
from ordertrack.errors import InvalidArgumentError, OrderTrackError
from ordertrack.logistics.carriers import get_courier_label, list_carriers
from ordertrack.logistics.client import TrackingClient
from ordertrack.models.logistics import (
    BatchQueryItem,
    BatchQueryRequest,
    BatchQueryResponse,
    CarrierInfo,
    LogisticsQueryData,
    LogisticsQueryRequest,
    LogisticsQueryResponse,
)
from ordertrack.utils.concurrency import run_bounded

router = APIRouter()
logger = logging.getLogger(__name__)

BATCH_QUERY_CONCURRENCY = 3
QUERY_FAILED_TEXT = "查询失败"


def format_status_time(value: datetime, utc_offset_hours: float) -> str:
    """Format a status time for display in the configured UTC offset."""
    display_tz = timezone(timedelta(hours=utc_offset_hours))
    return value.astimezone(display_tz).strftime("%Y-%m-%d %H:%M:%S")


def parse_waybill_numbers(
    waybill_nos: list[str], waybill_text: str | None
) -> list[str]:
    """
    Merge list and newline-separated waybills; trim, drop blanks, de-duplicate.

    First occurrence wins, so the input order is preserved.
    """
    candidates = list(waybill_nos)
    if waybill_text:
        candidates.extend(waybill_text.splitlines())

    seen: dict[str, None] = {}
    for candidate in candidates:
        number = candidate.strip()
        if number:
            seen.setdefault(number, None)
    return list(seen)


@router.get(
    "/logistics/carriers",
    response_model=list[CarrierInfo],
    operation_id="listCarriers",
)
async def get_carriers() -> list[CarrierInfo]:
    """List supported carrier codes with display labels."""
    return list_carriers()


@router.post(
    "/logistics/query",
    response_model=LogisticsQueryResponse,
    operation_id="queryLogistics",
)
async def query_logistics(
    request: LogisticsQueryRequest,
    client: TrackingClient = Depends(get_tracking_client),
    settings: Settings = Depends(get_settings),
) -> LogisticsQueryResponse:
    """
    Query the current logistics status of one waybill.

    Args:
        request: waybillNo and courierCode

    Returns:
        Classified status with status time

    Raises:
        400: Missing field or unsupported carrier
        502: Tracking provider query failed
    """
    result = await client.query(request.waybill_no, request.courier_code)

    return LogisticsQueryResponse(
        data=LogisticsQueryData(
            waybill_no=request.waybill_no.strip(),
            courier_code=request.courier_code.strip(),
            status=result.status,
            status_text=result.status.text,
            status_time=result.status_time,
            formatted_time=format_status_time(
                result.status_time, settings.display_utc_offset
            ),
        )
    )


async def _query_batch_item(
    client: TrackingClient,
    waybill_no: str,
    courier_code: str,
    utc_offset_hours: float,
) -> BatchQueryItem:
    item = {
        "waybill_no": waybill_no,
        "courier_code": courier_code,
        "courier_label": get_courier_label(courier_code),
    }

    try:
        result = await client.query(waybill_no, courier_code)
    except OrderTrackError as e:
        return BatchQueryItem(
            **item, success=False, status_text=QUERY_FAILED_TEXT, message=e.message
        )

    return BatchQueryItem(
        **item,
        success=True,
        status=result.status,
        status_text=result.status.text,
        status_time=result.status_time,
        formatted_time=format_status_time(result.status_time, utc_offset_hours),
    )


@router.post(
    "/logistics/batch-query",
    response_model=BatchQueryResponse,
    operation_id="batchQueryLogistics",
)
async def batch_query_logistics(
    request: BatchQueryRequest,
    client: TrackingClient = Depends(get_tracking_client),
    settings: Settings = Depends(get_settings),
) -> BatchQueryResponse:
    """
    Query many waybills for one carrier.

    Waybills are queried at most three at a time. Each result reports its own
    success, so one failed lookup does not fail the batch. Results are
    returned in input order.

    Raises:
        400: No waybill numbers, or more than the configured batch limit
    """
    waybill_nos = parse_waybill_numbers(request.waybill_nos, request.waybill_text)
    if not waybill_nos:
        raise InvalidArgumentError("At least one waybill number is required")
    if len(waybill_nos) > settings.batch_query_limit:
        raise InvalidArgumentError(
            f"At most {settings.batch_query_limit} waybill numbers per batch"
        )

    courier_code = request.courier_code.strip()
    outcomes = await run_bounded(
        [
            partial(
                _query_batch_item,
                client,
                waybill_no,
                courier_code,
                settings.display_utc_offset,
            )
            for waybill_no in waybill_nos
        ],
        limit=BATCH_QUERY_CONCURRENCY,
    )

    items: dict[str, BatchQueryItem] = {}
    for outcome in outcomes:
        if not outcome.ok:
            # Only non-domain errors reach here; their waybill is filled in below
            logger.error("Unexpected batch query error: %s", outcome.error)
            continue
        items[outcome.value.waybill_no] = outcome.value

    results = [
        items.get(waybill_no)
        or BatchQueryItem(
            waybill_no=waybill_no,
            courier_code=courier_code,
            courier_label=get_courier_label(courier_code),
            success=False,
            status_text=QUERY_FAILED_TEXT,
            message="Failed to query logistics status",
        )
        for waybill_no in waybill_nos
    ]
    succeeded = sum(1 for item in results if item.success)

    return BatchQueryResponse(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=results,
    )
