from pairlink.core.constants import ErrorCode
from pairlink.core.exceptions.base import AppException

# =============================================================================
# Generic Domain Exceptions (raised by Services, caught by Endpoints)
# =============================================================================


class ValidationError(AppException):
    """Malformed or missing client input."""

    error_code: ErrorCode = ErrorCode.BAD_REQUEST

    def __init__(self, message: str = "Validation failed", exception: Exception | None = None):
        super().__init__(message, exception)


class ConfigurationError(AppException):
    """Deployment defect; the request cannot be served until configuration is fixed."""

    error_code: ErrorCode = ErrorCode.NO_SECRET

    def __init__(
        self, message: str = "Service is misconfigured", exception: Exception | None = None
    ):
        super().__init__(message, exception)


class SecurityError(AppException):
    """Token or caller failed an integrity or authentication check."""

    error_code: ErrorCode = ErrorCode.BAD_TOKEN

    def __init__(self, message: str = "Security check failed", exception: Exception | None = None):
        super().__init__(message, exception)


class ExpiryError(AppException):
    """A token or claim is past its time-to-live. An expected outcome, not a fault."""

    error_code: ErrorCode = ErrorCode.TOKEN_EXPIRED

    def __init__(self, message: str = "Expired", exception: Exception | None = None):
        super().__init__(message, exception)


# =============================================================================
# Token Codec
# =============================================================================


class InvalidAccountId(ValidationError):
    error_code = ErrorCode.BAD_ACCOUNT_ID

    def __init__(self, message: str = "Account ID must be 17 digits"):
        super().__init__(message)


class InvalidNonce(ValidationError):
    error_code = ErrorCode.BAD_NONCE

    def __init__(self, message: str = "Nonce must be at least 16 characters"):
        super().__init__(message)


class InvalidTtl(ValidationError):
    error_code = ErrorCode.BAD_TTL

    def __init__(self, message: str = "ttlSeconds must be a number", exception=None):
        super().__init__(message, exception)


class MissingSecret(ConfigurationError):
    error_code = ErrorCode.NO_SECRET

    def __init__(self, message: str = "Signing secret (LINK_SECRET) is not configured"):
        super().__init__(message)


class BadSignature(SecurityError):
    error_code = ErrorCode.BAD_TOKEN

    def __init__(self, message: str = "Token signature mismatch"):
        super().__init__(message)


class MalformedPayload(SecurityError):
    # Same wire code as BadSignature so callers cannot tell the two apart
    error_code = ErrorCode.BAD_TOKEN

    def __init__(self, message: str = "Token payload could not be decoded", exception=None):
        super().__init__(message, exception)


class UnsupportedVersion(SecurityError):
    error_code = ErrorCode.UNSUPPORTED_VERSION

    def __init__(self, version: object = None):
        super().__init__(f"Unsupported token version: {version!r}")
        self.version = version


class Expired(ExpiryError):
    error_code = ErrorCode.TOKEN_EXPIRED

    def __init__(self, expires_at: int, now: int):
        super().__init__(f"Token expired {now - expires_at} ms ago")
        self.expires_at = expires_at
        self.now = now


# =============================================================================
# Claim Cache
# =============================================================================


class BadCodeFormat(ValidationError):
    error_code = ErrorCode.BAD_CODE_FORMAT

    def __init__(self, code: str = ""):
        super().__init__(f"Pairing code must look like RW-XXXX-XXXX, got {code!r}")
        self.code = code


class MissingIdentity(ValidationError):
    error_code = ErrorCode.MISSING_IDENTITY

    def __init__(self, message: str = "identity.id is required"):
        super().__init__(message)


class MissingGuild(ValidationError):
    error_code = ErrorCode.MISSING_GUILD_ID

    def __init__(self, message: str = "guildId is required"):
        super().__init__(message)
