"""Canteen FastAPI application.

Serves the cart, order and venue queue endpoints. Commands are processed
synchronously inside each request's domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from canteen/domain.toml.
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from canteen.domain import canteen
from canteen.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
canteen.init()

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Canteen API",
    description="Carts, orders and live venue queues for the Medical and BitBites counters",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the canteen domain context and bind request details to the log context."""
    clear_request_context()
    bind_request_context(
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        path=request.url.path,
        owner=request.headers.get("x-user-id"),
    )
    with canteen.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from canteen.api import cart_router, order_router, register_error_handlers, venue_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(venue_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": canteen.name})


@app.get("/")
async def root():
    return JSONResponse(
        content={
            "service": "Canteen API",
            "docs": "/docs",
            "health": "/health",
        }
    )
