import base64
import hmac
import time
from typing import Any

from fastapi import Request

from pairlink.core.config import Environment, settings


def now_ms() -> int:
    """
    Current wall-clock time in epoch milliseconds.

    Default clock for the token codec and the claim cache; tests inject their own.
    """
    return int(time.time() * 1000)


def b64url_encode(data: bytes) -> str:
    """
    Encode bytes as base64url without ``=`` padding

    Args:
        data (bytes): Raw bytes

    Returns:
        str: URL-safe base64 text with the trailing padding stripped
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str) -> bytes:
    """
    Decode unpadded base64url text

    Args:
        data (str): URL-safe base64 text, with or without padding

    Returns:
        bytes: Decoded bytes

    Raises:
        ValueError: If the text is not valid base64url
    """
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two strings without leaking the position of the first difference."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def normalize_pairing_code(code: Any) -> str:
    """
    Canonical form of a human-entered pairing code

    Args:
        code: Raw code as received (any case, surrounding whitespace, or None)

    Returns:
        str: Trimmed, upper-cased code; empty string for None
    """
    if code is None:
        return ""

    return str(code).strip().upper()


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request headers or remote address

    Args:
        request: FastAPI request object

    Returns:
        Client IP address as a string
    """
    if settings.current_environment == Environment.LOCAL:
        return "localhost"

    if "X-Forwarded-For" in request.headers:
        return request.headers["X-Forwarded-For"].split(",")[0].strip()

    if "X-Real-IP" in request.headers:
        return request.headers["X-Real-IP"].strip()

    return request.client.host if request.client else "unknown"
