"""FastAPI application entry point."""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from api.routes import game
from api.schemas import ErrorResponse
from api.session import close_deck_client, get_registry
from api.websocket import router as ws_router
from config import config
from core.errors import SupplyError
from core.logging_utils import get_logger, setup_logging

setup_logging(config.logging.level)
logger = get_logger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


def _supply_error_handler(request: Request, exc: SupplyError) -> JSONResponse:
    """Surface deck service failures; the session itself is unchanged."""
    logger.warning("Supply failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(detail=str(exc), reason=type(exc).__name__).model_dump(),
    )


# Seconds between sweeps of expired game sessions
SESSION_SWEEP_INTERVAL = 60


async def _sweep_sessions() -> None:
    """Drop expired sessions even when no new ones are being created."""
    while True:
        await asyncio.sleep(SESSION_SWEEP_INTERVAL)
        await get_registry().cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Sweep expired sessions while running; close the deck client on shutdown."""
    sweeper = asyncio.create_task(_sweep_sessions())
    yield
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    await close_deck_client()


app = FastAPI(
    title="Remote Deck Table",
    description="Player-versus-house card sessions dealt from a remote deck service",
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter to app state and exception handlers
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(SupplyError, _supply_error_handler)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(game.router, prefix="/api/game", tags=["game"])
app.include_router(ws_router, prefix="/ws", tags=["websocket"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=config.host, port=config.port, reload=config.debug)
