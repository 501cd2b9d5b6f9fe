# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS and request-logging middleware.
* Mount the auth router.
* Render domain errors as ``{"error": code, "detail": message}`` with a
  stable status code, and request-validation failures as 400s in the same
  shape.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
CORS origins come from ``settings.cors_origins``.  Set them to the exact
frontend origin before deploying.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth.router import router as auth_router
from core.config import settings
from core.errors import AuthError, ValidationError
from core.logger import logger

app = FastAPI(title="Weight Tracker", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies are never echoed – they carry passwords and security answers.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def _auth_error_handler(request: Request, exc: AuthError):
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s -> %s %s", request.method, request.url.path, exc.code, exc.context)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    # Only field locations are reported; the rejected values may be secrets
    fields = [".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()]
    fields = [f for f in fields if f]
    if fields:
        error = ValidationError("Invalid or missing fields: " + ", ".join(fields))
    else:
        error = ValidationError("Invalid request body")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)

# ---------------------------------------------------------------------------
# Lifecycle & health
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Weight Tracker auth service starting up")


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Weight Tracker auth service shutting down")


@app.get("/health")
def health():
    return {"status": "ok"}
