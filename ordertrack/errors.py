"""
Error taxonomy for ordertrack.

Every error carries a human-readable message and the HTTP status code the API
layer renders it with.
"""


class OrderTrackError(Exception):
    """Base error for all ordertrack failures."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(OrderTrackError):
    """A required field is missing or empty."""

    status_code = 400
    default_message = "Invalid argument"


class UnsupportedCarrierError(OrderTrackError):
    """No provider mapping exists for the carrier code."""

    status_code = 400
    default_message = "Unsupported carrier"

    def __init__(self, courier_code: str):
        self.courier_code = courier_code
        super().__init__(f"Unsupported carrier: {courier_code}")


class ProviderQueryFailedError(OrderTrackError):
    """The tracking provider call failed (network, timeout, bad response)."""

    status_code = 502
    default_message = "Failed to query logistics status"


class UpstreamSourceUnavailableError(OrderTrackError):
    """The pending-order source could not be read."""

    status_code = 500
    default_message = "Failed to fetch pending orders"


class OrderNotFoundError(OrderTrackError):
    status_code = 404

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class UnauthorizedError(OrderTrackError):
    status_code = 401
    default_message = "Unauthorized"


class ServiceUnavailableError(OrderTrackError):
    """A backing service required by the endpoint is not configured."""

    status_code = 503
    default_message = "Service not available"
