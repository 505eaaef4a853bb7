"""
Tests for the upstream order API client.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from curl_cffi import requests

from ordertrack.errors import UpstreamSourceUnavailableError
from ordertrack.models.order import OrderStatus
from ordertrack.sync.order_source import OrderSourceClient

pytest_plugins = ("pytest_asyncio",)

ORDER_API_URL = "https://orders.example.com/api/orders/query"


def _session_returning(body) -> AsyncMock:
    response = Mock()
    response.raise_for_status = Mock()
    response.json.return_value = body
    session = AsyncMock()
    session.get.return_value = response
    return session


class TestFetchPendingOrders:
    @pytest.mark.asyncio
    async def test_success(self):
        session = _session_returning(
            {
                "code": 200,
                "data": [
                    {
                        "orderId": "A",
                        "waybillNo": "SF1",
                        "courierCode": "SF",
                        "status": "SHIPPED",
                        "buyer": "ignored",
                    },
                    {
                        "orderId": "B",
                        "waybillNo": "YT2",
                        "courierCode": "YTO",
                        "status": "PENDING",
                    },
                ],
            }
        )
        source = OrderSourceClient(ORDER_API_URL, token="tok", session=session)

        orders = await source.fetch_pending_orders()

        assert [order.order_id for order in orders] == ["A", "B"]
        assert orders[0].status == OrderStatus.SHIPPED
        assert orders[1].courier_code == "YTO"

        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"status": "PENDING,SHIPPED"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_empty_data(self):
        source = OrderSourceClient(
            ORDER_API_URL, session=_session_returning({"code": 200, "data": []})
        )

        assert await source.fetch_pending_orders() == []

    @pytest.mark.asyncio
    async def test_non_success_code(self):
        source = OrderSourceClient(
            ORDER_API_URL,
            session=_session_returning({"code": 500, "message": "db down"}),
        )

        with pytest.raises(UpstreamSourceUnavailableError, match="db down"):
            await source.fetch_pending_orders()

    @pytest.mark.asyncio
    async def test_request_error(self):
        session = AsyncMock()
        session.get.side_effect = requests.RequestsError("timed out")
        source = OrderSourceClient(ORDER_API_URL, session=session)

        with pytest.raises(UpstreamSourceUnavailableError) as exc_info:
            await source.fetch_pending_orders()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_invalid_order_payload(self):
        source = OrderSourceClient(
            ORDER_API_URL,
            session=_session_returning(
                {"code": 200, "data": [{"orderId": "A", "status": "LOST"}]}
            ),
        )

        with pytest.raises(UpstreamSourceUnavailableError):
            await source.fetch_pending_orders()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [5, "orders", {"orderId": "A"}])
    async def test_data_not_a_list(self, data):
        source = OrderSourceClient(
            ORDER_API_URL, session=_session_returning({"code": 200, "data": data})
        )

        with pytest.raises(UpstreamSourceUnavailableError, match="invalid data"):
            await source.fetch_pending_orders()

    @pytest.mark.asyncio
    async def test_no_token_no_authorization(self):
        session = _session_returning({"code": 200, "data": []})
        source = OrderSourceClient(ORDER_API_URL, session=session)

        await source.fetch_pending_orders()

        _, kwargs = session.get.call_args
        assert "Authorization" not in kwargs["headers"]
