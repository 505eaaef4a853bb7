"""
Tests for the tracking client.

The provider is replaced with an AsyncMock so no network calls are made.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from ordertrack.errors import (
    InvalidArgumentError,
    ProviderQueryFailedError,
    UnsupportedCarrierError,
)
from ordertrack.logistics.client import TrackingClient, normalize_status_time
from ordertrack.logistics.provider import ProviderError, ProviderTrack
from ordertrack.models.logistics import LogisticsStatus

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture
def provider() -> AsyncMock:
    provider = AsyncMock()
    provider.track.return_value = ProviderTrack(
        last_status="DELIVERED Delivered",
        description="Signed by front desk",
        last_time="2024-03-01T10:30:00+08:00",
        raw={"data": {}},
    )
    return provider


@pytest.fixture
def client(provider: AsyncMock) -> TrackingClient:
    return TrackingClient(provider)


class TestQuery:
    @pytest.mark.asyncio
    async def test_query_success(self, client: TrackingClient, provider: AsyncMock):
        result = await client.query("SF1234567890", "SF")

        provider.track.assert_awaited_once_with("sfexpress", "SF1234567890")
        assert result.status == LogisticsStatus.DELIVERED
        assert result.status_time == datetime(2024, 3, 1, 2, 30, tzinfo=timezone.utc)
        assert result.raw_result == {"data": {}}

    @pytest.mark.asyncio
    async def test_inputs_are_trimmed(self, client: TrackingClient, provider):
        await client.query("  YT123  ", " YTO ")

        provider.track.assert_awaited_once_with("yto", "YT123")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "waybill_no,courier_code",
        [("", "SF"), ("SF123", ""), (None, "SF"), ("SF123", None), ("   ", "SF")],
    )
    async def test_missing_arguments(
        self, client: TrackingClient, provider, waybill_no, courier_code
    ):
        with pytest.raises(InvalidArgumentError):
            await client.query(waybill_no, courier_code)

        provider.track.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_carrier(self, client: TrackingClient, provider):
        with pytest.raises(UnsupportedCarrierError) as exc_info:
            await client.query("X123", "DHL")

        assert exc_info.value.message == "Unsupported carrier: DHL"
        assert exc_info.value.status_code == 400
        provider.track.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, client: TrackingClient, provider):
        provider.track.side_effect = ProviderError("timeout")

        with pytest.raises(ProviderQueryFailedError) as exc_info:
            await client.query("SF123", "SF")

        assert isinstance(exc_info.value.__cause__, ProviderError)
        assert exc_info.value.status_code == 502
        provider.track.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unparseable_time_is_wrapped(self, client: TrackingClient, provider):
        provider.track.return_value = ProviderTrack(
            last_status="In transit", last_time="not a time"
        )

        with pytest.raises(ProviderQueryFailedError):
            await client.query("SF123", "SF")

    @pytest.mark.asyncio
    async def test_unknown_status(self, client: TrackingClient, provider):
        provider.track.return_value = ProviderTrack(
            last_status="Label created", last_time="2024-03-01T00:00:00Z"
        )

        result = await client.query("SF123", "SF")

        assert result.status == LogisticsStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_status_code_takes_precedence(self, client: TrackingClient, provider):
        provider.track.return_value = ProviderTrack(
            last_status="IN_TRANSIT In transit",
            last_time="2024-03-01T00:00:00Z",
            description="异常件处理",
        )

        result = await client.query("SF123", "SF")

        assert result.status == LogisticsStatus.IN_TRANSIT

    @pytest.mark.asyncio
    async def test_description_fallback(self, client: TrackingClient, provider):
        provider.track.return_value = ProviderTrack(
            last_status="UNKNOWN",
            last_time="2024-03-01T00:00:00Z",
            description="已签收",
        )

        result = await client.query("SF123", "SF")

        assert result.status == LogisticsStatus.DELIVERED

    @pytest.mark.asyncio
    async def test_custom_carrier_mapping(self, provider):
        client = TrackingClient(provider, carrier_codes={"DHL": "dhl"})

        await client.query("JD0001", "DHL")

        provider.track.assert_awaited_once_with("dhl", "JD0001")
        with pytest.raises(UnsupportedCarrierError):
            await client.query("SF123", "SF")


class TestNormalizeStatusTime:
    def test_offset_string(self):
        value = normalize_status_time("2024-03-01T10:30:00+08:00")
        assert value == datetime(2024, 3, 1, 2, 30, tzinfo=timezone.utc)
        assert value.utcoffset() == timedelta(0)

    def test_naive_string_is_utc(self):
        value = normalize_status_time("2024-03-01 10:30:00")
        assert value == datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)

    def test_aware_datetime(self):
        tz = timezone(timedelta(hours=-5))
        value = normalize_status_time(datetime(2024, 3, 1, 7, 0, tzinfo=tz))
        assert value == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ValueError):
            normalize_status_time("yesterday")
