import re
from enum import StrEnum

# 17-digit numeric account identifier (e.g. a SteamID64), ASCII digits only
ACCOUNT_ID_PATTERN = re.compile(r"^[0-9]{17}$")

# Human-entered pairing code, matched after trim + upper-case
PAIRING_CODE_PATTERN = re.compile(r"^RW-[A-Z0-9]{4}-[A-Z0-9]{4}$")

NONCE_MIN_LENGTH = 16

TOKEN_VERSION = 1
SUPPORTED_TOKEN_VERSIONS = frozenset({TOKEN_VERSION})


class ErrorCode(StrEnum):
    """
    Stable, machine-readable error codes returned as ``{"ok": false, "error": <code>}``.

    Clients branch on these values, so existing members must never be renamed.
    """

    # Request validation (400)
    BAD_REQUEST = "bad_request"
    BAD_ACCOUNT_ID = "bad_account_id"
    BAD_NONCE = "bad_nonce"
    BAD_TTL = "bad_ttl"
    BAD_CODE_FORMAT = "bad_code_format"
    MISSING_IDENTITY = "missing_identity"
    MISSING_GUILD_ID = "missing_guild_id"
    MISSING_CODE = "missing_code"

    # Token verification (400)
    BAD_TOKEN = "bad_token"
    UNSUPPORTED_VERSION = "unsupported_version"
    TOKEN_EXPIRED = "token_expired"

    # Caller authentication (401)
    UNAUTHORIZED = "unauthorized"

    # Deployment defects (500)
    NO_SECRET = "no_secret"
