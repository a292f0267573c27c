import anyio
from fastapi import FastAPI, Request
from fastapi.concurrency import asynccontextmanager
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from pairlink.api.routes import api_router
from pairlink.core.config import Environment, settings
from pairlink.core.constants import ErrorCode
from pairlink.core.logger import configure_uvicorn_logging, setup_logger, shutdown_logger
from pairlink.middleware.logging import LoggingMiddleware
from pairlink.middleware.security_headers import SecurityHeadersMiddleware
from pairlink.services.claim_cache import ClaimCache, run_claim_sweeper
from pairlink.services.token_codec import TokenCodec


def build_token_codec() -> TokenCodec:
    return TokenCodec(
        secret=settings.link_secret,
        default_ttl_seconds=settings.token_ttl_default_seconds,
        min_ttl_seconds=settings.token_ttl_min_seconds,
    )


def build_claim_cache() -> ClaimCache:
    return ClaimCache(ttl_seconds=settings.claim_ttl_seconds)


def _init_state(app: FastAPI) -> None:
    """Attach the token codec and claim cache owned by this process"""

    app.state.token_codec = build_token_codec()
    app.state.claim_cache = build_claim_cache()

    if not app.state.token_codec.is_configured:
        logger.error("LINK_SECRET is not set; token minting and verification will fail with 500")
    else:
        logger.success("Token codec configured.")

    if settings.pair_callback_auth is None:
        logger.warning("PAIR_CALLBACK_AUTH is not set; /pair-claim accepts unauthenticated calls")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""

    setup_logger()
    configure_uvicorn_logging()

    logger.info("Initializing resources...")
    _init_state(app)
    logger.success("Resources initialized.")

    async with anyio.create_task_group() as tg:
        if settings.claim_sweep_interval_seconds > 0:
            tg.start_soon(
                run_claim_sweeper,
                app.state.claim_cache,
                settings.claim_sweep_interval_seconds,
            )

        yield  # Application runs here

        logger.info("Cleaning up resources...")
        tg.cancel_scope.cancel()

    app.state.claim_cache.clear()
    shutdown_logger()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Framework errors (404, 405) carry prose details; render them as snake_case codes too
    if isinstance(exc.detail, ErrorCode):
        error = exc.detail.value
    else:
        error = str(exc.detail).strip().lower().replace(" ", "_")

    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": error},
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": ErrorCode.BAD_REQUEST.value},
    )


ALLOWED_ENVIRONMENTS = {Environment.LOCAL, Environment.DEV, Environment.STG}

app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description=settings.app_description,
    openapi_url=("/openapi.json" if settings.current_environment in ALLOWED_ENVIRONMENTS else None),
    docs_url="/docs" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    redoc_url="/redoc" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    lifespan=lifespan,
    generate_unique_id_function=lambda route: f"{route.tags[0]}-{route.name}",
    exception_handlers={
        StarletteHTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
    },
)

# Set CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)

# Set logging middleware
app.add_middleware(LoggingMiddleware)

# Include API router
app.include_router(api_router)
