"""FastAPI application.

- Request-id propagation and one structured access log line per request
- Domain errors surface as their kind and reason; internals never leak
- Database outages fail with 503
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.api.router import router as api_router
from app.core.errors import DomainError
import app.models as _models  # noqa: F401  (register all ORM models deterministically)


logger = logging.getLogger("conviction_engine")
logger.setLevel(logging.INFO)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Conviction Engine API",
        version="1.0.0",
        openapi_url="/openapi.json",
        description="Signals, weighted convictions, consensus, momentum and credibility-staked challenges.",
    )

    app.include_router(api_router)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.reason, "kind": exc.kind},
        )

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except OperationalError:
            logger.error(json.dumps({"event": "db_unavailable", "request_id": request_id}))
            return JSONResponse(
                status_code=503,
                content={"detail": "Service temporarily unavailable."},
                headers={"x-request-id": request_id},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal error."},
                headers={"x-request-id": request_id},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()
