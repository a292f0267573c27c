from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from pairlink.api.v1.deps.auth import verify_pair_callback_auth
from pairlink.api.v1.deps.errors import to_http_exception
from pairlink.api.v1.deps.services import get_claim_cache
from pairlink.core import responses
from pairlink.core.constants import ErrorCode
from pairlink.core.exceptions import http_exceptions
from pairlink.core.exceptions.base import AppException
from pairlink.schemas import ClaimStatus, PairClaimRequest, PairClaimResponse
from pairlink.services.claim_cache import ClaimCache

router = APIRouter()


@router.post(
    "/pair-claim",
    response_model=PairClaimResponse,
    dependencies=[Depends(verify_pair_callback_auth)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": responses.UnauthorizedResponse},
    },
    summary="Record a pairing claim",
    description="Called by the bot once a chat-platform identity has claimed a pairing code.",
)
async def record_pair_claim(
    body: PairClaimRequest,
    cache: Annotated[ClaimCache, Depends(get_claim_cache)],
):
    try:
        record = cache.record_claim(
            code=body.code,
            identity=body.identity,
            guild_id=body.guild_id,
            account_id=body.account_id,
            extra=body.extra,
        )
    except AppException as e:
        raise to_http_exception(e)

    logger.info(
        f"Pair claimed: {record.code} by {record.identity.id} in guild {record.guild_id}"
    )

    return PairClaimResponse(
        code=record.code,
        guild_id=record.guild_id,
        claimed_at=record.created_at,
    )


@router.get(
    "/pair-status",
    response_model=ClaimStatus,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
    },
    summary="Poll a pairing code",
    description="Returns claimed=true with the identity once the code has a live claim.",
)
async def get_pair_status(
    cache: Annotated[ClaimCache, Depends(get_claim_cache)],
    code: Annotated[str | None, Query()] = None,
):
    if code is None or not code.strip():
        raise http_exceptions.BadRequestException(detail=ErrorCode.MISSING_CODE)

    return cache.query_claim(code)
