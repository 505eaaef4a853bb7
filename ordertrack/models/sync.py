from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from ordertrack.models.logistics import LogisticsStatus
from ordertrack.models.order import CamelModel, OrderStatus


class SyncStats(CamelModel):
    """Aggregate counters for one reconciliation run"""

    total_orders: int = Field(default=0, description="Orders fetched for the run")
    success_count: int = Field(default=0, description="Orders processed without error")
    fail_count: int = Field(default=0, description="Orders whose processing failed")
    delivered_count: int = Field(default=0, description="Transitions to DELIVERED")
    failed_delivery_count: int = Field(
        default=0, description="Transitions to DELIVERY_FAILED"
    )
    skipped_count: int = Field(
        default=0, description="Orders skipped because already terminal"
    )


class SyncResponse(CamelModel):
    success: bool
    message: str
    stats: SyncStats


class ManualSyncRequest(CamelModel):
    order_id: Optional[str] = Field(default=None, description="Order to reconcile")

    model_config = ConfigDict(extra="ignore")


class SingleSyncResult(CamelModel):
    """Result of reconciling one order on demand"""

    order_id: str
    synced: bool = Field(description="False when the order was already terminal")
    current_status: OrderStatus
    logistics_status: Optional[LogisticsStatus] = None
    status_time: Optional[datetime] = None
    transitioned: bool = False
    message: Optional[str] = None


class ManualSyncResponse(CamelModel):
    success: bool
    message: str
    data: Optional[SingleSyncResult] = None
