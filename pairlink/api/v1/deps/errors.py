from loguru import logger

from pairlink.core.exceptions import http_exceptions
from pairlink.core.exceptions.base import AppException, HTTPException
from pairlink.core.exceptions.domain import (
    ConfigurationError,
    ExpiryError,
    SecurityError,
    ValidationError,
)


def to_http_exception(error: AppException) -> HTTPException:
    """
    Translate a domain exception into the HTTP exception carrying its error code.

    Each category is logged at its own severity: configuration errors are deployment
    defects (ERROR), expiry is an expected outcome (INFO), client mistakes and
    rejected tokens are routine (DEBUG).

    Args:
        error: Domain exception raised by a service

    Returns:
        HTTPException: 500 for configuration errors, 400 otherwise
    """
    if isinstance(error, ConfigurationError):
        logger.error(f"Configuration error: {error}")
        return http_exceptions.InternalServerErrorException(detail=error.error_code)

    if isinstance(error, ExpiryError):
        logger.info(str(error))
    elif isinstance(error, (SecurityError, ValidationError)):
        logger.debug(f"{error.__class__.__name__}: {error.message}")
    else:
        logger.warning(f"Unmapped domain error {error.__class__.__name__}: {error}")

    return http_exceptions.BadRequestException(detail=error.error_code)
