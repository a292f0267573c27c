from typing import Optional

from starlette import status

from pairlink.core.constants import ErrorCode
from pairlink.core.exceptions.base import HTTPException


class BadRequestException(HTTPException):
    def __init__(
        self,
        detail: ErrorCode = ErrorCode.BAD_REQUEST,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """
        The request was malformed or failed validation. The client must fix
        the request before retrying.
        :param detail: Stable error code describing what was wrong.
        :param headers: Optional headers to include in the response.
        """
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            headers=headers,
        )


class UnauthorizedException(HTTPException):
    def __init__(
        self,
        detail: ErrorCode = ErrorCode.UNAUTHORIZED,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """
        The caller did not present the shared bearer secret, or presented a
        wrong one.
        :param detail: Stable error code, ``unauthorized`` by default.
        :param headers: Optional headers to include in the response.
        """
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers=headers,
        )


class InternalServerErrorException(HTTPException):
    def __init__(
        self,
        detail: ErrorCode,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """
        The server is not able to serve the request because of its own
        configuration (e.g. the signing secret is missing).
        :param detail: Stable error code describing the deployment defect.
        :param headers: Optional headers to include in the response.
        """
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            headers=headers,
        )
