# src/localip_pub/main.py
"""Main entry point for the localip-pub application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from localip_pub.api.v1 import addresses_router
from localip_pub.core.logging_config import setup_logging
from localip_pub.core.settings import settings
from localip_pub.db.session import create_tables
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "could not validate json, please check json, content-type and documentation"

# Initialize FastAPI app
app = FastAPI(
    title="localip-pub",
    description="Publish a dynamic IP address behind password-guarded bearer tokens",
    version=settings.app_version,
)

# One state object per process: write tokens, read throttle and id locks
app.state.session_state = SessionState()
app.state.token_codec = TokenCodec()

app.include_router(addresses_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug("Rejected body for %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"info": VALIDATION_MESSAGE},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        info = "resource does not exist"
    else:
        info = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"info": info})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"info": "internal server error"},
    )


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging(settings.log_level, settings.to_stdout)
    create_tables()
    logger.info("%s %s ready", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint greeting clients."""
    return {"info": "hello localip-pub"}


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(
        "localip_pub.main:app",
        host=settings.hostname,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
