from typing import Annotated

from fastapi import APIRouter, Depends

from pairlink.api.v1.deps.services import get_claim_cache
from pairlink.api.v1.router import api_v1_router
from pairlink.schemas.health_check import HealthCheckResponse
from pairlink.services.claim_cache import ClaimCache

api_router = APIRouter()


@api_router.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health Check",
)
async def health_check(cache: Annotated[ClaimCache, Depends(get_claim_cache)]):
    return HealthCheckResponse(status="healthy", active_claims=len(cache))


api_router.include_router(
    api_v1_router,
)
