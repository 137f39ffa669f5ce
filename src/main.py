import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from src.cache.client import close_session_store, init_session_store
from src.config.logging_config import configure_logging
from src.config.settings import settings
from src.database.client import close_db, init_db
from src.features.auth.exceptions import AuthenticationException
from src.features.auth.router import router as auth_router
from src.features.user.router import router as user_router

configure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

# Global rate limiter, keyed by client address
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded"},
    )


async def auth_exception_handler(request: Request, exc: AuthenticationException) -> Response:
    """Render auth failures as a minimal JSON message."""
    if exc.status_code >= 500:
        logger.error(f"Upstream failure on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={exc.body_key: exc.detail},
        headers=exc.headers,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    await init_db()
    await init_session_store()
    yield
    # Shutdown
    await close_session_store()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# Add rate limiting middleware
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(AuthenticationException, auth_exception_handler)
app.add_middleware(SlowAPIMiddleware)

# Credentials are carried in the Authorization header and a same-site
# cookie, so wildcard origins never get credentialed CORS.
cors_origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

# Router Registration
routers: list[APIRouter] = [
    auth_router,
    user_router,
]

for router in routers:
    app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": "Storefront API", "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


def run() -> None:
    """Serve the app with uvicorn (``storefront-api`` console script)."""
    uvicorn.run("src.main:app", host=settings.host, port=settings.port, log_config=None)
