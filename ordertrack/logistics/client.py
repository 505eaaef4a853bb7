"""
Tracking client.

Wraps a single tracking provider query: validates input, maps the internal
carrier code, queries the provider once and classifies the reported status.
"""

import logging
from datetime import datetime, timezone

from ordertrack.errors import (
    InvalidArgumentError,
    ProviderQueryFailedError,
    UnsupportedCarrierError,
)
from ordertrack.logistics.carriers import COURIER_CODE_MAPPING
from ordertrack.logistics.classifier import classify_event
from ordertrack.logistics.provider import TrackingProvider
from ordertrack.models.logistics import TrackingResult

logger = logging.getLogger(__name__)


def normalize_status_time(value: datetime | str) -> datetime:
    """
    Convert a provider timestamp to a UTC-aware datetime.

    Naive values are taken as UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    if not isinstance(value, datetime):
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TrackingClient:
    """
    Queries logistics status for a waybill.

    Usage:
        client = TrackingClient(DeliveryTrackerProvider(api_url))
        result = await client.query("SF1234567890", "SF")
    """

    def __init__(
        self,
        provider: TrackingProvider,
        carrier_codes: dict[str, str] | None = None,
    ):
        self.provider = provider
        self.carrier_codes = (
            carrier_codes if carrier_codes is not None else COURIER_CODE_MAPPING
        )

    def resolve_carrier(self, courier_code: str) -> str:
        """Map an internal carrier code to the provider carrier id."""
        provider_code = self.carrier_codes.get(courier_code)
        if not provider_code:
            raise UnsupportedCarrierError(courier_code)
        return provider_code

    async def query(
        self, waybill_no: str | None, courier_code: str | None
    ) -> TrackingResult:
        """
        Query and classify the current logistics status of a waybill.

        Args:
            waybill_no: Carrier waybill number
            courier_code: Internal carrier code (e.g. "SF")

        Returns:
            TrackingResult with logical status and UTC status time

        Raises:
            InvalidArgumentError: Waybill or carrier code is empty
            UnsupportedCarrierError: Carrier code has no provider mapping
            ProviderQueryFailedError: Provider call or response failed
        """
        waybill_no = (waybill_no or "").strip()
        courier_code = (courier_code or "").strip()
        if not waybill_no or not courier_code:
            raise InvalidArgumentError("Waybill number and courier code are required")

        provider_code = self.resolve_carrier(courier_code)
        log_fields = {
            "waybillNo": waybill_no,
            "courierCode": courier_code,
            "providerCode": provider_code,
        }

        logger.info("Querying logistics status", extra={"json_fields": log_fields})

        try:
            track = await self.provider.track(provider_code, waybill_no)
            status = classify_event(track.last_status, track.description)
            status_time = normalize_status_time(track.last_time)
        except Exception as e:
            logger.error(
                "Logistics status query failed",
                extra={"json_fields": {**log_fields, "error": str(e)}},
            )
            raise ProviderQueryFailedError() from e

        logger.info(
            "Logistics status query succeeded",
            extra={
                "json_fields": {
                    "waybillNo": waybill_no,
                    "status": status.value,
                    "rawStatus": track.last_status,
                    "description": track.description,
                    "statusTime": status_time.isoformat(),
                }
            },
        )

        return TrackingResult(
            status=status, status_time=status_time, raw_result=track.raw
        )
