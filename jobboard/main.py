"""FastAPI entry point for the job board API."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobboard.config import settings
from jobboard.errors import StorageError
from jobboard.routers import jobs
from jobboard.services.job_service import JobService
from jobboard.store import JobStore, create_store

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def create_app(store: JobStore | None = None) -> FastAPI:
    """Build the app. Without an explicit store the backend is picked from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        active = store if store is not None else create_store(settings)
        app.state.job_service = JobService(active)
        logger.info("Job board API ready (storage: %s)", active.name)

        yield

        # Shutdown
        active.close()
        logger.info("Job board API stopped")

    app = FastAPI(
        title="Job Board",
        description="Personal job application tracker",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Registered before CORS so CORSMiddleware wraps it and still answers real preflights.
    @app.middleware("http")
    async def bare_options(request: Request, call_next):
        if request.method == "OPTIONS" and request.url.path.startswith("/api"):
            return Response(status_code=200)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"error": _validation_message(exc)}, status_code=400)

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            {"error": "Internal server error", "message": str(exc)}, status_code=500
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # ServerErrorMiddleware re-raises after this handler, so the server logs the traceback.
        logger.error("API error on %s %s: %r", request.method, request.url.path, exc)
        return JSONResponse(
            {"error": "Internal server error", "message": str(exc)}, status_code=500
        )

    app.include_router(jobs.router)

    @app.get("/api/health")
    async def health(request: Request) -> dict:
        return {"status": "ok", "storage": request.app.state.job_service.store.name}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "jobboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
