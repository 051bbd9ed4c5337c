"""FastAPI application entry point.

Run with: python -m src.main   (uvicorn on the uvloop event loop)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.context import SyncContext
from src.hcb_common.enums import PinStoreBackend
from src.hcb_common.errors import AppError, InternalError
from src.hcb_common.response import error_response
from src.hcb_gateway.middleware.request_log import RequestLogMiddleware
from src.hcb_home.api.router import router as home_router
from src.hcb_home.application.service import HomeService
from src.hcb_network.infrastructure.connectivity import ConnectivityFeed
from src.hcb_network.infrastructure.http_fetcher import HttpxFetcher
from src.hcb_pins.infrastructure.persistence import (
    JsonFilePinnedPersistence,
    RedisPinnedPersistence,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

logger = logging.getLogger(__name__)


def build_persistence() -> JsonFilePinnedPersistence | RedisPinnedPersistence:
    if PinStoreBackend(settings.PIN_STORE) is PinStoreBackend.REDIS:
        return RedisPinnedPersistence(settings.REDIS_URL, settings.PINNED_REDIS_KEY)
    return JsonFilePinnedPersistence(settings.PIN_FILE_PATH)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the sync context and mount the home screen. Shutdown: tear down."""
    # Startup
    fetcher = HttpxFetcher(
        settings.API_BASE_URL,
        token=settings.API_TOKEN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    connectivity = ConnectivityFeed()
    persistence = build_persistence()
    context = await SyncContext.create(
        fetcher=fetcher,
        connectivity=connectivity,
        persistence=persistence,
    )
    home = HomeService(context)
    home.mount()
    app.state.context = context
    app.state.connectivity = connectivity
    app.state.home = home
    yield
    # Shutdown
    home.unmount()
    await context.close()
    await fetcher.aclose()
    if isinstance(persistence, RedisPinnedPersistence):
        await persistence.close()


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    err = InternalError()
    resp = error_response(err.code, err.message)
    return JSONResponse(
        status_code=err.http_status,
        content=resp.model_dump(),
    )


app.include_router(home_router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request) -> dict[str, str | bool]:
    context = getattr(request.app.state, "context", None)
    online = context.monitor.is_online if context is not None else False
    return {"status": "ok", "version": "0.1.0", "online": online}


def run() -> None:
    uvicorn.run("src.main:app", host="127.0.0.1", port=8000, loop="uvloop")


if __name__ == "__main__":
    run()
