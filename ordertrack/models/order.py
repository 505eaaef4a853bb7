from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(StrEnum):
    """Order lifecycle status (values match the upstream order API)"""

    PENDING = "PENDING"  # Awaiting shipment
    SHIPPED = "SHIPPED"  # Handed to carrier
    DELIVERED = "DELIVERED"  # Carrier reports delivery
    DELIVERY_FAILED = "DELIVERY_FAILED"  # Carrier reports failure or refusal

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.DELIVERY_FAILED})

# Statuses requested from the order source for reconciliation
SYNCABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.SHIPPED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PendingOrder(CamelModel):
    """Order as reported by the upstream order source"""

    order_id: str = Field(description="Upstream order identifier")
    waybill_no: str = Field(description="Carrier waybill number")
    courier_code: str = Field(description="Internal carrier code (e.g. SF, YTO)")
    status: OrderStatus = Field(description="Status observed at fetch time")

    model_config = ConfigDict(extra="ignore")


class Order(CamelModel):
    """
    Local mirror of an order.

    Status only moves forward: once DELIVERED or DELIVERY_FAILED the order is
    never transitioned again by reconciliation.
    """

    order_id: str = Field(description="Order identifier (unique)")
    waybill_no: str = Field(description="Carrier waybill number")
    courier_code: str = Field(description="Internal carrier code")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Status")
    created_at: datetime = Field(
        default_factory=_utcnow, description="Record creation time"
    )
    updated_at: datetime = Field(default_factory=_utcnow, description="Last update")


class OrderStatusLog(CamelModel):
    """Append-only record of one applied status transition"""

    id: str = Field(description="Log entry identifier (UUID)")
    order_id: str = Field(description="Order identifier")
    old_status: OrderStatus = Field(description="Status before the transition")
    new_status: OrderStatus = Field(description="Status after the transition")
    created_at: datetime = Field(default_factory=_utcnow, description="When applied")


class LogisticsFailRecord(CamelModel):
    """Failure ledger entry, one per order, for manual follow-up"""

    order_id: str = Field(description="Order identifier (unique)")
    waybill_no: str = Field(description="Carrier waybill number")
    courier_code: str = Field(description="Internal carrier code")
    fail_count: int = Field(default=1, ge=1, description="Number of failed syncs")
    last_fail_time: datetime = Field(
        default_factory=_utcnow, description="Most recent failure"
    )
    created_at: Optional[datetime] = Field(default=None, description="First failure")
