"""
Service dependencies for API routes.

Services are constructed once in the application lifespan and stored on
app.state; routes receive them through these dependencies.
"""

from fastapi import Request

from ordertrack.config import Settings, load_settings
from ordertrack.errors import ServiceUnavailableError
from ordertrack.logistics.client import TrackingClient
from ordertrack.sync.reconciler import OrderReconciler


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()


def get_tracking_client(request: Request) -> TrackingClient:
    """Tracking client shared by all requests."""
    client = getattr(request.app.state, "tracking_client", None)
    if client is None:
        raise ServiceUnavailableError("Tracking client not available")
    return client


def get_reconciler(request: Request) -> OrderReconciler:
    """
    Order reconciler shared by all requests.

    Raises:
        ServiceUnavailableError: 503 if the database is not configured
    """
    reconciler = getattr(request.app.state, "reconciler", None)
    if reconciler is None:
        raise ServiceUnavailableError("Database not available")
    return reconciler
