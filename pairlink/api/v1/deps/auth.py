from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from pairlink.core.config import settings
from pairlink.core.exceptions import http_exceptions
from pairlink.core.utils import constant_time_equals

# auto_error=False: the check is optional and a missing header must map to our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


async def verify_pair_callback_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> None:
    """
    Authorize the bot's pair-claim callback against the shared secret

    When PAIR_CALLBACK_AUTH is not configured the endpoint is open.

    Args:
        credentials: Bearer credentials parsed from the Authorization header

    Raises:
        UnauthorizedException: If a secret is configured and the caller's token differs
    """
    if settings.pair_callback_auth is None:
        return

    expected = settings.pair_callback_auth.get_secret_value()
    if not expected:
        return

    presented = credentials.credentials if credentials else ""

    if not constant_time_equals(presented, expected):
        logger.warning("Rejected pair-claim callback with missing or invalid bearer token")
        raise http_exceptions.UnauthorizedException(
            headers={"WWW-Authenticate": "Bearer"},
        )
