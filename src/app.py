"""Laundry shop FastAPI application.

Web server for the shop floor app. Commands are processed synchronously
per HTTP request, and each request is wrapped in the correct domain
context based on URL prefix.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from laundry.domain import laundry  # noqa: E402
from notifications.domain import notifications  # noqa: E402
from protean.integrations.fastapi import register_exception_handlers

laundry.init()
notifications.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/orders": laundry,
    "/customers": laundry,
    "/machines": laundry,
    "/catalog": laundry,
    "/reports": laundry,
    "/notifications": notifications,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Laundry API",
    description="Laundry order fulfillment — Laundry & Notifications domains",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from laundry.api import catalog_router, customer_router, machine_router, order_router, report_router  # noqa: E402
from notifications.api.routes import router as notifications_router  # noqa: E402

app.include_router(order_router)
app.include_router(customer_router)
app.include_router(machine_router)
app.include_router(catalog_router)
app.include_router(report_router)
app.include_router(notifications_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "laundry": {"name": laundry.name},
                "notifications": {"name": notifications.name},
            },
        }
    )
