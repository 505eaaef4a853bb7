"""
Tracking provider HTTP client.

Queries the Delivery Tracker GraphQL API for the last tracking event of a
shipment. Uses curl_cffi's async session so many queries can share one
connection pool.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from curl_cffi import requests

TRACK_QUERY = """
query Track($carrierId: ID!, $trackingNumber: String!) {
  track(carrierId: $carrierId, trackingNumber: $trackingNumber) {
    lastEvent {
      time
      status {
        code
        name
      }
      description
    }
  }
}
"""


class ProviderError(Exception):
    """The tracking provider returned an error or an unusable response."""


@dataclass
class ProviderTrack:
    """Last tracking event as reported by the provider."""

    last_status: str
    last_time: datetime | str
    description: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class TrackingProvider(Protocol):
    async def track(self, carrier_id: str, tracking_number: str) -> ProviderTrack: ...

    async def close(self) -> None: ...


class DeliveryTrackerProvider:
    """
    Delivery Tracker GraphQL client.

    Usage:
        provider = DeliveryTrackerProvider(api_url, api_key="id:secret")
        track = await provider.track("sfexpress", "SF1234567890")
        await provider.close()
    """

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        session: requests.AsyncSession | None = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.AsyncSession:
        if self._session is None:
            self._session = requests.AsyncSession()
        return self._session

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"TRACKQL-API-KEY {self.api_key}"
        return headers

    async def track(self, carrier_id: str, tracking_number: str) -> ProviderTrack:
        """
        Fetch the last tracking event for a shipment.

        Args:
            carrier_id: Provider carrier id (e.g. "sfexpress")
            tracking_number: Waybill number

        Returns:
            ProviderTrack with the last status code, description and time

        Raises:
            ProviderError: On HTTP, GraphQL or payload errors
        """
        payload = {
            "query": TRACK_QUERY,
            "variables": {"carrierId": carrier_id, "trackingNumber": tracking_number},
        }

        try:
            response = await self.session.post(
                self.api_url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestsError as e:
            raise ProviderError(f"Tracking request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Tracking response is not JSON: {e}") from e

        return self._parse_track(body)

    @staticmethod
    def _parse_track(body: dict[str, Any]) -> ProviderTrack:
        errors = body.get("errors")
        if errors:
            message = errors[0].get("message", "unknown error")
            raise ProviderError(f"Tracking provider error: {message}")

        track = (body.get("data") or {}).get("track")
        last_event = (track or {}).get("lastEvent")
        if not last_event:
            raise ProviderError("Tracking response has no last event")

        status = last_event.get("status") or {}
        parts = [status.get("code"), status.get("name")]
        last_status = " ".join(part for part in parts if part)
        last_time = last_event.get("time")

        if not last_time:
            raise ProviderError("Tracking response has no event time")

        return ProviderTrack(
            last_status=last_status,
            last_time=last_time,
            description=last_event.get("description") or None,
            raw=body,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
