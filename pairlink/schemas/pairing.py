from typing import Any, Literal

from pydantic import AliasChoices, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pairlink.schemas.base import BaseRequestSchema, BaseSchema

# Flat identity keys sent by older bot builds instead of a nested ``identity`` object
_FLAT_IDENTITY_KEYS = ("discord_user_id", "discordUserId", "userId", "user_id")


class Identity(BaseSchema):
    """Chat-platform identity that claimed a pairing code"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str
    display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "display_name", "username"),
    )


class ClaimRecord(BaseSchema):
    """Cache entry; replaced wholesale on a repeat claim, never mutated"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    claimed: Literal[True] = True
    code: str
    created_at: int  # epoch milliseconds
    identity: Identity
    guild_id: str
    account_id: str | None = None
    extra: dict[str, Any] | None = None


class ClaimStatus(BaseSchema):
    claimed: bool
    identity: Identity | None = None


class PairClaimRequest(BaseRequestSchema):
    code: Any = None
    identity: Any = None
    guild_id: Any = Field(default=None, validation_alias=AliasChoices("guildId", "guild_id"))
    account_id: Any = Field(
        default=None,
        validation_alias=AliasChoices("accountId", "account_id", "steamId", "steamid"),
    )
    extra: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def fold_flat_identity(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("identity") is not None:
            return data

        for key in _FLAT_IDENTITY_KEYS:
            if data.get(key) is not None:
                identity = {"id": data[key]}
                if data.get("displayName") is not None:
                    identity["displayName"] = data["displayName"]
                return {**data, "identity": identity}

        return data


class PairClaimResponse(BaseSchema):
    ok: Literal[True] = True
    code: str
    guild_id: str
    claimed_at: int
