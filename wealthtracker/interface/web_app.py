"""Mini README: FastAPI pairing service for WealthTracker.

Structure:
    * SyncStoreRequest - request body for uploading a payload.
    * create_application - application factory wiring routes and handlers.

Routes are registered at the root and again under ``/api`` so both the
current clients and the original browser page can reach them:

    POST /sync          -> {"code", "expiresAt"}
    GET  /sync/{code}   -> {"data"}
    GET  /health        -> {"status": "ok", "timestamp"}

Store failures are raised as ``SyncError`` subclasses and translated into
``{"error", "kind"}`` responses by a single exception handler; anything else
becomes an ``internal`` 500 with the same shape.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..configuration import WealthTrackerSettings, get_settings
from ..logging_utils import get_logger
from ..sync import SyncCodeStore, SyncError, SyncInternalError

LOGGER = get_logger(__name__)


class SyncStoreRequest(BaseModel):
    """Upload body; ``code`` is only sent when the client picks its own code."""

    data: Any = None
    code: Optional[Any] = None


def _isoformat_utc(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def _sweep_expired_codes(store: SyncCodeStore, interval_seconds: float) -> None:
    """Periodically drop expired codes to keep memory bounded."""

    while True:
        await asyncio.sleep(interval_seconds)
        store.purge_expired()


def create_application(
    store: Optional[SyncCodeStore] = None,
    settings: Optional[WealthTrackerSettings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    if store is None:
        store = SyncCodeStore(ttl_seconds=settings.sync_ttl_seconds)
    clock = clock or (lambda: datetime.now(timezone.utc))

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        sweeper = None
        if settings.sync_sweep_interval_seconds:
            sweeper = asyncio.create_task(
                _sweep_expired_codes(store, settings.sync_sweep_interval_seconds)
            )
            LOGGER.info(
                "Started expired-code sweep every %s seconds", settings.sync_sweep_interval_seconds
            )
        application.state.sync_sweeper = sweeper
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with suppress(asyncio.CancelledError):
                    await sweeper

    app = FastAPI(title="WealthTracker Sync", version="0.1.0", lifespan=lifespan)
    app.state.sync_store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(SyncError)
    async def handle_sync_error(request: Request, exc: SyncError) -> JSONResponse:
        LOGGER.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(exc.as_dict(), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("%s %s failed unexpectedly", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error", "kind": "internal"}, status_code=500)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        LOGGER.warning("%s %s malformed request: %s", request.method, request.url.path, exc.errors())
        return JSONResponse({"error": "Malformed request body", "kind": "validation"}, status_code=400)

    router = APIRouter()

    @router.post("/sync")
    async def store_payload(body: SyncStoreRequest) -> JSONResponse:
        """Store a payload and return the code that redeems it."""

        try:
            receipt = store.store(body.data, code=body.code)
            return JSONResponse(receipt.as_dict())
        except SyncError:
            raise
        except Exception as error:
            LOGGER.exception("Unexpected failure while storing payload")
            raise SyncInternalError("Internal server error") from error

    @router.get("/sync/{code}")
    async def retrieve_payload(code: str) -> JSONResponse:
        """Return the payload stored under ``code``."""

        try:
            return JSONResponse({"data": store.retrieve(code)})
        except SyncError:
            raise
        except Exception as error:
            LOGGER.exception("Unexpected failure while retrieving code %s", code)
            raise SyncInternalError("Internal server error") from error

    @router.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "timestamp": _isoformat_utc(clock())})

    app.include_router(router)
    app.include_router(router, prefix="/api")
    return app
