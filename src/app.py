"""Stockflow FastAPI application.

Processes commands synchronously via HTTP; every request runs inside the
stockflow domain context.

Row locks live in this process, so the API must run as a single worker; the
app refuses to start when WEB_CONCURRENCY asks uvicorn for more.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized once, at module level, in the single worker.
# PROTEAN_ENV controls which config overlay is applied (e.g. "production"
# switches the default database to PostgreSQL).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from stockflow.domain import stockflow  # noqa: E402
from stockflow.inventory.locks import ensure_single_process  # noqa: E402
from stockflow.utils.logging import bind_request, unbind_request  # noqa: E402

ensure_single_process()
stockflow.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Stockflow API",
    description="Order fulfillment core: stock ledger and order lifecycle",
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
    """Push the stockflow domain context for each request."""
    bind_request(request.method, request.url.path)
    try:
        with stockflow.domain_context():
            response = await call_next(request)
    finally:
        unbind_request()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from stockflow.api import (  # noqa: E402
    order_router,
    product_router,
    register_stockflow_exception_handlers,
    report_router,
    stock_router,
    user_router,
)

app.include_router(user_router)
app.include_router(product_router)
app.include_router(stock_router)
app.include_router(order_router)
app.include_router(report_router)

register_stockflow_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": stockflow.name})
