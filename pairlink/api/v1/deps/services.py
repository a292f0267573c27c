from fastapi import Request

from pairlink.services.claim_cache import ClaimCache
from pairlink.services.token_codec import TokenCodec


def get_token_codec(request: Request) -> TokenCodec:
    """Token codec built at startup and owned by the application."""
    return request.app.state.token_codec


def get_claim_cache(request: Request) -> ClaimCache:
    """Claim cache built at startup and owned by the application."""
    return request.app.state.claim_cache
