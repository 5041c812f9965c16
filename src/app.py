"""Storefront orders FastAPI application.

Serves customers their own orders and receives order status webhooks from
the commerce store. Ordering requests are wrapped in the ordering domain
context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from notifications.config import config_summary, validate_and_log_email_config
from ordering.domain import ordering
from shared.logging import configure_logging, get_runtime_tier

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the runtime tier; without a domain config the ordering
# domain runs on protean's in-memory providers.
ordering.init()

_ROUTE_DOMAIN_MAP = {
    "/orders": ordering,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    tier = get_runtime_tier()
    # Misconfiguration is fatal in production and advisory elsewhere
    validate_and_log_email_config(throw_on_error=tier == "production")
    logger.info("Application started", environment=tier)
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Orders API",
    description="Order access control and order status notifications",
    lifespan=lifespan,
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from notifications.api.routes import router as notifications_router  # noqa: E402
from ordering.api.routes import order_router  # noqa: E402

app.include_router(order_router)
app.include_router(notifications_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    email = config_summary()
    return JSONResponse(
        content={
            "status": "ok",
            "environment": get_runtime_tier(),
            "domains": {"ordering": {"name": ordering.name}},
            "email": {
                "api_key_configured": email["api_key_configured"],
                "webhook_secret_configured": email["webhook_secret_configured"],
                "recipient_override_active": email["recipient_override_active"],
            },
        }
    )
