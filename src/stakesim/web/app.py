"""FastAPI application factory for the stakesim API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stakesim.config import Settings
from stakesim.exceptions import InvalidInput, OutOfRange, StakeSimError, UpstreamUnavailable
from stakesim.web.cache import CacheService
from stakesim.web.schemas import ErrorResponse

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidInput: 422,
    OutOfRange: 422,
    UpstreamUnavailable: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: log startup and shutdown."""
    logger.info("Starting stakesim API...")
    yield
    app.state.cache.clear_prefix("")
    logger.info("stakesim API shutdown complete")


async def _handle_stakesim_error(request: Request, exc: StakeSimError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error={"code": exc.code, "message": str(exc)})
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="stakesim API",
        description="Ethereum validator reward projection - capped (0x01) vs compounding (EIP-7251)",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.cache = CacheService(ttl=settings.cache_ttl, maxsize=settings.cache_maxsize)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(StakeSimError, _handle_stakesim_error)

    _register_routers(app)

    return app


def _register_routers(app: FastAPI):
    """Register all API routers."""
    from stakesim.web.routers.projection import router as projection_router
    from stakesim.web.routers.validators import router as validators_router
    from stakesim.web.routers.system import router as system_router

    app.include_router(projection_router, prefix="/api/v1")
    app.include_router(validators_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")
