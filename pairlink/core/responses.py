from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    ok: Literal[False] = False
    error: str


class BadRequestResponse(ErrorResponse):
    error: str = "bad_request"


class UnauthorizedResponse(ErrorResponse):
    error: str = "unauthorized"


class InternalServerErrorResponse(ErrorResponse):
    error: str = "no_secret"
