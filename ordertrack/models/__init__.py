"""
Ordertrack data models.

This package contains all Pydantic models for orders, logistics queries and
reconciliation runs.
"""

# Logistics models
from ordertrack.models.logistics import (
    BatchQueryItem,
    BatchQueryRequest,
    BatchQueryResponse,
    CarrierInfo,
    LogisticsQueryData,
    LogisticsQueryRequest,
    LogisticsQueryResponse,
    LogisticsStatus,
    TrackingResult,
)

# Order models
from ordertrack.models.order import (
    SYNCABLE_STATUSES,
    TERMINAL_STATUSES,
    LogisticsFailRecord,
    Order,
    OrderStatus,
    OrderStatusLog,
    PendingOrder,
)

# Sync models
from ordertrack.models.sync import (
    ManualSyncRequest,
    ManualSyncResponse,
    SingleSyncResult,
    SyncResponse,
    SyncStats,
)

__all__ = [
    # Logistics
    "BatchQueryItem",
    "BatchQueryRequest",
    "BatchQueryResponse",
    "CarrierInfo",
    "LogisticsQueryData",
    "LogisticsQueryRequest",
    "LogisticsQueryResponse",
    "LogisticsStatus",
    "TrackingResult",
    # Order
    "SYNCABLE_STATUSES",
    "TERMINAL_STATUSES",
    "LogisticsFailRecord",
    "Order",
    "OrderStatus",
    "OrderStatusLog",
    "PendingOrder",
    # Sync
    "ManualSyncRequest",
    "ManualSyncResponse",
    "SingleSyncResult",
    "SyncResponse",
    "SyncStats",
]
