"""
Logistics tracking: carrier mapping, status classification and provider access.
"""

from ordertrack.logistics.carriers import COURIER_CODE_MAPPING, list_carriers
from ordertrack.logistics.classifier import classify_event, classify_status
from ordertrack.logistics.client import TrackingClient
from ordertrack.logistics.provider import DeliveryTrackerProvider, ProviderTrack

__all__ = [
    "COURIER_CODE_MAPPING",
    "DeliveryTrackerProvider",
    "ProviderTrack",
    "TrackingClient",
    "classify_event",
    "classify_status",
    "list_carriers",
]
