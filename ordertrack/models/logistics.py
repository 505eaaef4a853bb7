from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import ConfigDict, Field

from ordertrack.models.order import CamelModel


class LogisticsStatus(StrEnum):
    """Logical status derived from a carrier's free-text status"""

    DELIVERED = "Delivered"
    IN_TRANSIT = "InTransit"
    DELIVERY_FAILED = "DeliveryFailed"
    UNKNOWN = "Unknown"

    @property
    def text(self) -> str:
        """Display label shown to operators."""
        return STATUS_TEXT[self]


STATUS_TEXT = {
    LogisticsStatus.DELIVERED: "已送达",
    LogisticsStatus.IN_TRANSIT: "运输中",
    LogisticsStatus.DELIVERY_FAILED: "配送失败",
    LogisticsStatus.UNKNOWN: "状态未知",
}


class TrackingResult(CamelModel):
    """Classified outcome of a single tracking query (not persisted)"""

    status: LogisticsStatus = Field(description="Logical status")
    status_time: datetime = Field(description="Carrier status time (UTC)")
    raw_result: Optional[dict[str, Any]] = Field(
        default=None, description="Provider payload, for debugging"
    )


class CarrierInfo(CamelModel):
    code: str = Field(description="Internal carrier code")
    label: str = Field(description="Carrier display name")


# API Request/Response Models


class LogisticsQueryRequest(CamelModel):
    """Request body for a single waybill query."""

    waybill_no: Optional[str] = Field(default=None, description="Waybill number")
    courier_code: Optional[str] = Field(default=None, description="Carrier code")

    model_config = ConfigDict(extra="ignore")


class LogisticsQueryData(CamelModel):
    waybill_no: str
    courier_code: str
    status: LogisticsStatus
    status_text: str
    status_time: datetime
    formatted_time: str


class LogisticsQueryResponse(CamelModel):
    success: bool = True
    data: LogisticsQueryData


class BatchQueryRequest(CamelModel):
    """
    Request body for a batch query.

    Waybills may be given as a list or as newline-separated text; both are
    merged, trimmed and de-duplicated in order.
    """

    waybill_nos: list[str] = Field(default_factory=list)
    waybill_text: Optional[str] = Field(default=None)
    courier_code: str = Field(default="SF", description="Carrier for every waybill")

    model_config = ConfigDict(extra="ignore")


class BatchQueryItem(CamelModel):
    waybill_no: str
    courier_code: str
    courier_label: str
    success: bool
    status: Optional[LogisticsStatus] = None
    status_text: str
    status_time: Optional[datetime] = None
    formatted_time: Optional[str] = None
    message: Optional[str] = None


class BatchQueryResponse(CamelModel):
    success: bool = True
    total: int
    succeeded: int
    failed: int
    results: list[BatchQueryItem]
