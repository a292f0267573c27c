from fastapi import APIRouter

from pairlink.api.v1.endpoints import pairing, token

api_v1_router = APIRouter(prefix="/api/v1")


api_v1_router.include_router(
    token.router,
    tags=["Token"],
)

api_v1_router.include_router(
    pairing.router,
    tags=["Pairing"],
)
