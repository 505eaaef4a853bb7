"""
Upstream order API client.

Fetches the orders that still need logistics reconciliation from the
existing order query API.
"""

import logging

from curl_cffi import requests
from pydantic import ValidationError

from ordertrack.errors import UpstreamSourceUnavailableError
from ordertrack.models.order import SYNCABLE_STATUSES, PendingOrder

logger = logging.getLogger(__name__)


class OrderSourceClient:
    """
    Client for the pending-order query API.

    The API responds with {"code": 200, "data": [{orderId, waybillNo,
    courierCode, status}, ...]}; any other code is treated as an error.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float = 10.0,
        session: requests.AsyncSession | None = None,
    ):
        self.url = url
        self.token = token
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.AsyncSession:
        if self._session is None:
            self._session = requests.AsyncSession()
        return self._session

    async def fetch_pending_orders(self) -> list[PendingOrder]:
        """
        Fetch orders in PENDING or SHIPPED status.

        Returns:
            Orders to reconcile

        Raises:
            UpstreamSourceUnavailableError: On any request or payload failure
        """
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        params = {"status": ",".join(status.value for status in SYNCABLE_STATUSES)}

        logger.info("Fetching pending orders", extra={"json_fields": {"url": self.url}})

        try:
            response = await self.session.get(
                self.url, headers=headers, params=params, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()

            if not isinstance(body, dict) or body.get("code") != 200:
                message = body.get("message") if isinstance(body, dict) else body
                raise UpstreamSourceUnavailableError(
                    f"Order API returned error: {message}"
                )

            data = body.get("data") or []
            if not isinstance(data, list):
                raise UpstreamSourceUnavailableError("Order API returned invalid data")

            orders = [PendingOrder.model_validate(item) for item in data]
        except UpstreamSourceUnavailableError as e:
            logger.error("Failed to fetch pending orders: %s", e.message)
            raise
        except (requests.RequestsError, ValidationError, ValueError) as e:
            logger.error("Failed to fetch pending orders: %s", e)
            raise UpstreamSourceUnavailableError() from e

        logger.info("Fetched %d pending orders", len(orders))
        return orders

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
