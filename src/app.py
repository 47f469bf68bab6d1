"""FleetOps FastAPI application.

Processes order, proof and driver commands synchronously over HTTP. Each
request runs inside the fleetops domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers, handlers fire inside the UoW
#   - "production" → PostgreSQL, handlers fire via the Engine (src/server.py)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fleetops.domain import fleetops
from fleetops.utils.logging import clear_context

fleetops.init()

_DOMAIN_PREFIXES = ("/orders", "/drivers")

app = FastAPI(
    title="FleetOps API",
    description="Order fulfillment — dispatch, activity tracking and proof of delivery",
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
    """Push the fleetops domain context for API requests."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        try:
            with fleetops.domain_context():
                return await call_next(request)
        finally:
            clear_context()
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from fleetops.api import driver_router, order_router, register_error_handlers  # noqa: E402

app.include_router(order_router)
app.include_router(driver_router)
register_error_handlers(app)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": fleetops.name})
