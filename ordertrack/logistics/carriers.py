"""
Carrier code mapping.

Maps the internal carrier codes used by orders to the carrier ids understood
by the tracking provider, plus a display label for each carrier.
"""

from ordertrack.models.logistics import CarrierInfo

# Internal code -> tracking provider carrier id
COURIER_CODE_MAPPING: dict[str, str] = {
    "SF": "sfexpress",
    "YTO": "yto",
    "ZTO": "zto",
    "Yunda": "yunda",
    "TTKDEX": "ttkdex",
    "JD": "jdlogistics",
    "Cainiao": "cainiao",
}

COURIER_LABELS: dict[str, str] = {
    "SF": "顺丰速运",
    "YTO": "圆通快递",
    "ZTO": "中通快递",
    "Yunda": "韵达快递",
    "TTKDEX": "天天快递",
    "JD": "京东物流",
    "Cainiao": "菜鸟驿站",
}

UNKNOWN_COURIER_LABEL = "未知"


def get_courier_label(courier_code: str) -> str:
    """Return the display label for a carrier code."""
    return COURIER_LABELS.get(courier_code, UNKNOWN_COURIER_LABEL)


def list_carriers() -> list[CarrierInfo]:
    """List supported carriers in mapping order."""
    return [
        CarrierInfo(code=code, label=get_courier_label(code))
        for code in COURIER_CODE_MAPPING
    ]
