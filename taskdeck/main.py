import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from taskdeck.config import get_settings
from taskdeck.exceptions import (
    IntegrationError,
    LockError,
    NetworkError,
    PersistenceError,
    RateLimitError,
)
from taskdeck.logging_setup import setup_logging
from taskdeck.mcp_server import mcp
from taskdeck.models.common import StatusResponse
from taskdeck.routers.postal import router as postal_router
from taskdeck.routers.tasks import router as tasks_router

logger = logging.getLogger(__name__)


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return JSONResponse(
                status_code=403,
                content={"error_code": "forbidden", "message": "Localhost access only"},
            )
        return await call_next(request)


# --- FastAPI app ---

api = FastAPI(title="Taskdeck", version="0.1.0")
api.include_router(tasks_router)
api.include_router(postal_router)


@api.get("/api/status")
def api_status() -> StatusResponse:
    from taskdeck.services.tasks import get_task_store
    from taskdeck.zip_table import get_zip_table

    store = get_task_store()
    return StatusResponse(
        tasks_file=str(store.path),
        task_count=len(store.list_tasks()),
        zip_table_entries=len(get_zip_table()),
    )


# --- Exception handlers ---

def _error(status_code: int, error_code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error_code": error_code, "message": str(exc)})


@api.exception_handler(LockError)
async def lock_error_handler(request: Request, exc: LockError):
    return _error(503, "lock_error", exc)


@api.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Task file write failed: %s", exc)
    return _error(500, "persistence_error", exc)


@api.exception_handler(NetworkError)
async def network_error_handler(request: Request, exc: NetworkError):
    return _error(502, "network_error", exc)


@api.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    return _error(502, "integration_error", exc)


@api.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    return _error(429, "rate_limit", exc)


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    setup_logging(
        console_level=getattr(logging, settings.log_level.upper(), logging.INFO),
        log_file=settings.log_file,
    )

    # Load persisted tasks and the postal table before serving the first request.
    from taskdeck.services.tasks import get_task_store
    from taskdeck.zip_table import get_zip_table

    get_task_store()
    get_zip_table()

    uvicorn.run(
        "taskdeck.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
