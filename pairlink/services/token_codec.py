import hashlib
import hmac
import json
from typing import Any, Callable

from loguru import logger
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from pairlink.core.constants import (
    ACCOUNT_ID_PATTERN,
    NONCE_MIN_LENGTH,
    SUPPORTED_TOKEN_VERSIONS,
    TOKEN_VERSION,
)
from pairlink.core.exceptions.domain import (
    BadSignature,
    Expired,
    InvalidAccountId,
    InvalidNonce,
    InvalidTtl,
    MalformedPayload,
    MissingSecret,
    UnsupportedVersion,
)
from pairlink.core.utils import b64url_decode, b64url_encode, constant_time_equals, now_ms
from pairlink.schemas import MintResult, TokenPayload

DEFAULT_TTL_SECONDS = 600
MIN_TTL_SECONDS = 60


class TokenCodec:
    """
    Mints and verifies stateless pairing tokens.

    Wire form: ``b64url(json(payload)) + "." + b64url(hmac_sha256(secret, b64url(json(payload))))``,
    both segments unpadded. The MAC covers the encoded payload text only, not the separator.

    The codec holds no per-token state: a token may be verified any number of times
    until it expires. The claim cache is what stops a pairing code being claimed twice.

    Raises domain exceptions (ValidationError, ConfigurationError, SecurityError, ExpiryError)
    which are translated to HTTP responses by the endpoint layer.
    """

    def __init__(
        self,
        secret: str | SecretStr | None,
        clock: Callable[[], int] = now_ms,
        default_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        min_ttl_seconds: int = MIN_TTL_SECONDS,
    ):
        if isinstance(secret, SecretStr):
            secret = secret.get_secret_value()

        self._key: bytes | None = secret.encode("utf-8") if secret else None
        self.clock = clock
        self.min_ttl_seconds = min_ttl_seconds
        self.default_ttl_seconds = max(default_ttl_seconds, min_ttl_seconds)

    @property
    def is_configured(self) -> bool:
        return self._key is not None

    def _require_key(self) -> bytes:
        if self._key is None:
            raise MissingSecret()

        return self._key

    def _sign(self, encoded_payload: str) -> str:
        digest = hmac.new(self._require_key(), encoded_payload.encode("ascii"), hashlib.sha256)
        return b64url_encode(digest.digest())

    def _resolve_ttl(self, ttl_seconds: Any) -> int:
        if ttl_seconds is None:
            return self.default_ttl_seconds

        if isinstance(ttl_seconds, bool):
            raise InvalidTtl()

        try:
            ttl = int(ttl_seconds)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidTtl(exception=e)

        return max(ttl, self.min_ttl_seconds)

    def mint(
        self,
        account_id: Any,
        nonce: Any = None,
        ttl_seconds: Any = None,
    ) -> MintResult:
        """
        Build and sign a pairing token for an account.

        Args:
            account_id: 17-digit numeric account ID (str or int)
            nonce: Optional client session binding, at least 16 characters
            ttl_seconds: Lifetime in seconds, clamped to the minimum; default when None

        Returns:
            MintResult: The signed token with its effective TTL and expiry instant

        Raises:
            InvalidAccountId: If the account ID is not 17 digits
            InvalidNonce: If a nonce is given but is too short
            InvalidTtl: If ttl_seconds is not a number
            MissingSecret: If no signing secret is configured
        """
        account_id = "" if account_id is None else str(account_id)
        if not ACCOUNT_ID_PATTERN.fullmatch(account_id):
            raise InvalidAccountId()

        if nonce is not None:
            nonce = str(nonce)
            if len(nonce) < NONCE_MIN_LENGTH:
                raise InvalidNonce()

        ttl = self._resolve_ttl(ttl_seconds)
        self._require_key()

        issued_at = self.clock()
        payload = TokenPayload(
            version=TOKEN_VERSION,
            account_id=account_id,
            nonce=nonce,
            issued_at=issued_at,
            expires_at=issued_at + ttl * 1000,
        )
        payload_json = json.dumps(
            payload.model_dump(by_alias=True, exclude_none=True),
            separators=(",", ":"),
        )
        encoded_payload = b64url_encode(payload_json.encode("utf-8"))
        token = f"{encoded_payload}.{self._sign(encoded_payload)}"

        logger.debug(f"Minted pairing token for account {account_id[-4:]} (TTL: {ttl}s)")

        return MintResult(token=token, ttl_seconds=ttl, expires_at=payload.expires_at)

    def verify(self, token: Any) -> TokenPayload:
        """
        Check a token's signature, version and expiry.

        Args:
            token: Signed token text

        Returns:
            TokenPayload: The decoded claim

        Raises:
            MissingSecret: If no signing secret is configured
            BadSignature: If the token is not two segments or its MAC does not match
            MalformedPayload: If the signed payload is not a valid claim
            UnsupportedVersion: If the payload version is unknown
            Expired: If the current time is past expiresAt
        """
        self._require_key()

        if not isinstance(token, str) or "." not in token:
            raise BadSignature()

        encoded_payload, _, encoded_sig = token.rpartition(".")

        try:
            expected_sig = self._sign(encoded_payload)
        except UnicodeEncodeError:
            raise BadSignature()

        if not encoded_sig.isascii() or not constant_time_equals(expected_sig, encoded_sig):
            raise BadSignature()

        try:
            raw = json.loads(b64url_decode(encoded_payload))
        except ValueError as e:
            raise MalformedPayload(exception=e)

        if not isinstance(raw, dict):
            raise MalformedPayload()

        version = raw.get("version")
        if (
            not isinstance(version, int)
            or isinstance(version, bool)
            or version not in SUPPORTED_TOKEN_VERSIONS
        ):
            raise UnsupportedVersion(version)

        try:
            payload = TokenPayload.model_validate(raw)
        except PydanticValidationError as e:
            raise MalformedPayload(exception=e)

        now = self.clock()
        if now > payload.expires_at:
            raise Expired(expires_at=payload.expires_at, now=now)

        return payload
