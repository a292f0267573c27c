from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from pairlink.core.config import Environment, settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses.

    Every response of this service is either a one-shot token or a polled
    claim state, so nothing may be cached by browsers or intermediaries:
    ``Cache-Control: no-store`` is forced, overriding any handler value.

    Also sets:
        - X-Content-Type-Options: Prevents MIME-type sniffing
        - X-Frame-Options: Prevents clickjacking attacks
        - Referrer-Policy: Controls referrer information
        - Strict-Transport-Security: Enforces HTTPS (stg/prd only)

    Reference: https://cheatsheetseries.owasp.org/cheatsheets/HTTP_Headers_Cheat_Sheet.html
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response: Response = await call_next(request)

        response.headers["Cache-Control"] = "no-store"

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"

        if settings.current_environment in {Environment.STG, Environment.PRD}:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
