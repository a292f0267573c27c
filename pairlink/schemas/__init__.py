from .base import BaseRequestSchema, BaseSchema
from .health_check import HealthCheckResponse
from .pairing import (
    ClaimRecord,
    ClaimStatus,
    Identity,
    PairClaimRequest,
    PairClaimResponse,
)
from .token import (
    MintResult,
    TokenMintRequest,
    TokenPayload,
    TokenVerifyRequest,
    TokenVerifyResponse,
)

__all__ = [
    "BaseSchema",
    "BaseRequestSchema",
    "HealthCheckResponse",
    "ClaimRecord",
    "ClaimStatus",
    "Identity",
    "PairClaimRequest",
    "PairClaimResponse",
    "MintResult",
    "TokenMintRequest",
    "TokenPayload",
    "TokenVerifyRequest",
    "TokenVerifyResponse",
]
