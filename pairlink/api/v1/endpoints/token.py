from typing import Annotated

from fastapi import APIRouter, Depends, status

from pairlink.api.v1.deps.errors import to_http_exception
from pairlink.api.v1.deps.services import get_token_codec
from pairlink.core import responses
from pairlink.core.exceptions.base import AppException
from pairlink.schemas import MintResult, TokenMintRequest, TokenVerifyRequest, TokenVerifyResponse
from pairlink.services.token_codec import TokenCodec

router = APIRouter()


@router.post(
    "/token",
    response_model=MintResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": responses.InternalServerErrorResponse},
    },
    summary="Mint a pairing token",
    description="Sign a short-lived token asserting that an account requested pairing.",
)
async def mint_token(
    body: TokenMintRequest,
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
):
    try:
        return codec.mint(
            account_id=body.account_id,
            nonce=body.nonce,
            ttl_seconds=body.ttl_seconds,
        )
    except AppException as e:
        raise to_http_exception(e)


@router.post(
    "/verify",
    response_model=TokenVerifyResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": responses.BadRequestResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": responses.InternalServerErrorResponse},
    },
    summary="Verify a pairing token",
    description=(
        "Check signature, version and expiry. Signature and payload failures are "
        "reported identically as bad_token."
    ),
)
async def verify_token(
    body: TokenVerifyRequest,
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
):
    try:
        payload = codec.verify(body.token)
    except AppException as e:
        raise to_http_exception(e)

    return TokenVerifyResponse(
        account_id=payload.account_id,
        nonce=payload.nonce,
        issued_at=payload.issued_at,
        expires_at=payload.expires_at,
    )
