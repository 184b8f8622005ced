"""HTTP mapping for stockflow failures.

Protean's own exceptions (``ValidationError`` → 400, ``ObjectNotFoundError`` →
404) are handled by ``protean.integrations.fastapi``; this adds the typed
failures of the stockflow core, each carrying its own status code.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from stockflow.domain import logger
from stockflow.exceptions import StockflowError


async def stockflow_error_handler(request: Request, exc: StockflowError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("request_failed", path=request.url.path, code=type(exc).__name__, error=str(exc))
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_stockflow_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(StockflowError, stockflow_error_handler)
