"""
Authentication dependencies for API routes.

Scheduled endpoints are called by a cron trigger that sends the shared
CRON_SECRET as a bearer token.
"""

import hmac
import logging

from fastapi import Depends, Header

from ordertrack.api.dependencies import get_settings
from ordertrack.config import Settings
from ordertrack.errors import UnauthorizedError

logger = logging.getLogger(__name__)


async def verify_cron_secret(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Check the Authorization header against the configured cron secret.

    Requests are rejected when no secret is configured.

    Raises:
        UnauthorizedError: 401 if the header is missing or does not match
    """
    if not settings.cron_secret:
        logger.error("CRON_SECRET is not configured, rejecting scheduled request")
        raise UnauthorizedError()

    expected = f"Bearer {settings.cron_secret}"
    if authorization is None or not hmac.compare_digest(
        authorization.encode(), expected.encode()
    ):
        logger.error("Scheduled request authentication failed")
        raise UnauthorizedError()
