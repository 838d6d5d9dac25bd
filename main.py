from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from core.database import ping as mongo_ping
from core.errors import INVALID_INPUT_MESSAGE
from core.logging_config import configure_logging
from core.response_envelope import (
    apply_response_documentation,
    document_response,
    error_response,
    http_exception_response,
)
from core.settings import get_settings
from core.storage.manager import ImageStorageManager
from core.validation_errors import format_validation_error_details

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

Path(settings.storage_local_root).mkdir(parents=True, exist_ok=True)


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    ImageStorageManager.configure_from_settings()
    logger.info("startup env=%s storage_root=%s", settings.env, settings.storage_local_root)
    yield


app = FastAPI(lifespan=lifespan, title="Places API")
app.add_middleware(RequestIdMiddleware)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins) if settings.cors_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)
app.mount(
    f"/{settings.storage_local_root.strip('/')}",
    StaticFiles(directory=settings.storage_local_root),
    name="images",
)


@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
    return http_exception_response(exc=exc, request=request)


@app.exception_handler(RequestValidationError)
async def custom_validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        status_code=422,
        message=INVALID_INPUT_MESSAGE,
        data={"code": "VALIDATION_FAILED", "details": format_validation_error_details(exc.errors())},
        request_id=getattr(request.state, "request_id", None),
    )


@app.exception_handler(Exception)
async def custom_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error path=%s", request.url.path)
    details = str(exc) if (settings.debug_include_error_details and not settings.is_production) else None
    return error_response(
        status_code=500,
        message="An unknown error occurred!",
        data={"code": "INTERNAL_ERROR", "details": details},
        request_id=getattr(request.state, "request_id", None),
    )


@app.get("/health", tags=["Health"])
@document_response(
    message="Health check completed",
    success_example={"status": "healthy", "services": {"mongo": {"status": "healthy"}}},
)
async def health_check():
    start = time.perf_counter()
    try:
        await mongo_ping()
        mongo = {"status": "healthy", "message": "MongoDB ping successful"}
    except Exception as exc:
        mongo = {"status": "unhealthy", "message": str(exc)}
    mongo["latency_ms"] = round((time.perf_counter() - start) * 1000, 2)

    return {
        "status": mongo["status"] if mongo["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {"mongo": mongo},
    }


from api.v1.place_route import router as v1_place_route_router
from api.v1.user_route import router as v1_user_route_router

app.include_router(v1_place_route_router, prefix="/v1")
app.include_router(v1_user_route_router, prefix="/v1")

apply_response_documentation(app)


def run() -> None:
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
