"""
Carrier status classification.

Maps a carrier's free-text status to a LogisticsStatus by case-insensitive
substring matching. Vocabularies are checked in priority order: delivered,
then failure, then in-transit. A string that matches both a failure term and
a transit term is therefore DeliveryFailed. Matching is by substring, so
"undelivered" contains "delivered" and classifies as Delivered.
"""

from ordertrack.models.logistics import LogisticsStatus

DELIVERED_TERMS = ("delivered", "signed", "签收")
FAILURE_TERMS = ("fail", "exception", "refused", "rejected", "异常", "拒收")
IN_TRANSIT_TERMS = ("transit", "transport", "dispatch", "运输", "派送")

# First match wins
_CLASSIFICATION_RULES = (
    (DELIVERED_TERMS, LogisticsStatus.DELIVERED),
    (FAILURE_TERMS, LogisticsStatus.DELIVERY_FAILED),
    (IN_TRANSIT_TERMS, LogisticsStatus.IN_TRANSIT),
)


def classify_status(raw_status: str | None) -> LogisticsStatus:
    """
    Classify a free-text carrier status.

    Args:
        raw_status: Status text reported by the tracking provider

    Returns:
        Matching LogisticsStatus, or UNKNOWN when no vocabulary matches
    """
    if not raw_status:
        return LogisticsStatus.UNKNOWN

    text = raw_status.lower()
    for terms, status in _CLASSIFICATION_RULES:
        if any(term in text for term in terms):
            return status

    return LogisticsStatus.UNKNOWN


def classify_event(
    status_code: str | None, description: str | None = None
) -> LogisticsStatus:
    """
    Classify a tracking event from its status code and free-text description.

    The provider's status code and name are authoritative. The description is
    consulted only when they classify as UNKNOWN, so a descriptive note such
    as "exception handled" cannot override an IN_TRANSIT code.

    Args:
        status_code: Provider status code and name (e.g. "IN_TRANSIT In transit")
        description: Carrier's description of the event

    Returns:
        Matching LogisticsStatus, or UNKNOWN when neither text matches
    """
    status = classify_status(status_code)
    if status is LogisticsStatus.UNKNOWN:
        return classify_status(description)
    return status
