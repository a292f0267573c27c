from typing import Any, Literal

from pydantic import AliasChoices, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pairlink.core.constants import ACCOUNT_ID_PATTERN
from pairlink.schemas.base import BaseRequestSchema, BaseSchema


class TokenPayload(BaseSchema):
    """Signed claim carried inside a pairing token"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        strict=True,
        frozen=True,
    )

    version: int
    account_id: str = Field(pattern=ACCOUNT_ID_PATTERN.pattern)
    nonce: str | None = None
    issued_at: int  # epoch milliseconds
    expires_at: int  # epoch milliseconds


class MintResult(BaseSchema):
    """Signed token plus auxiliary metadata that is not part of the signed material"""

    token: str
    ttl_seconds: int
    expires_at: int


class TokenMintRequest(BaseRequestSchema):
    account_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("accountId", "account_id", "steamId", "steamid"),
    )
    nonce: Any = Field(default=None, validation_alias=AliasChoices("nonce", "token"))
    ttl_seconds: Any = Field(
        default=None,
        validation_alias=AliasChoices("ttlSeconds", "ttl_seconds"),
    )


class TokenVerifyRequest(BaseRequestSchema):
    token: Any = Field(default=None, validation_alias=AliasChoices("token", "code"))


class TokenVerifyResponse(BaseSchema):
    ok: Literal[True] = True
    account_id: str
    nonce: str | None = None
    issued_at: int
    expires_at: int
