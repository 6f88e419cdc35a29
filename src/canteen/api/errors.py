"""HTTP mappings for canteen errors that protean's handlers do not cover."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from canteen.errors import NotAuthenticated, StoreFailure

logger = structlog.get_logger(__name__)


async def _not_authenticated(request: Request, exc: NotAuthenticated) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": exc.messages})


async def _store_failure(request: Request, exc: StoreFailure) -> JSONResponse:
    logger.error("Store failure while serving request", path=request.url.path, error=exc.messages)
    return JSONResponse(status_code=503, content={"error": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    """Install protean's handlers (validation → 400, not found → 404) plus ours."""
    register_exception_handlers(app)
    app.add_exception_handler(NotAuthenticated, _not_authenticated)
    app.add_exception_handler(StoreFailure, _store_failure)
