from typing import Any, Optional

from fastapi import HTTPException as FastAPIHTTPException

from pairlink.core.constants import ErrorCode


class AppException(Exception):
    """
    Base for domain errors raised by services.

    ``error_code`` is the wire code the API reports when the error reaches a client.
    """

    error_code: ErrorCode = ErrorCode.BAD_REQUEST

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.exception = exception

    def __str__(self):
        if self.exception:
            return f"{self.message} (caused by {self.exception.__class__.__name__}: {self.exception})"

        return self.message


class HTTPException(FastAPIHTTPException):
    def __init__(
        self,
        status_code: int,
        detail: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """
        HTTP error whose detail is an error code, rendered as ``{"ok": false, "error": detail}``.
        :param status_code: HTTP status of the response.
        :param detail: Stable error code rendered as the ``error`` field of the response body.
        :param headers: Optional headers to include in the HTTP response.
        """
        super().__init__(status_code=status_code, detail=detail, headers=headers)
