"""FastAPI application factory for the NotSpot CRM emulator."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .config import settings
from .errors import ConflictError, StoreError, ValidationError
from .middleware import CorrelationIdMiddleware, correlation_id

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite; other engines use Alembic migrations
    if settings.is_sqlite:
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    if settings.seed_on_startup:
        from .database import async_session_factory
        from .services import seed_svc
        async with async_session_factory() as db:
            await seed_svc.seed_all(db)
    yield


def error_body(request: Request, exc: StoreError) -> dict:
    return {
        "status": "error",
        "message": exc.message,
        "correlationId": correlation_id(request),
        "category": exc.category,
    }


app = FastAPI(title=settings.app_title, lifespan=lifespan)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    if exc.status_code >= 500:
        log.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(error_body(request, exc), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    err = ValidationError(f"Invalid input JSON: {details}" if details else "Invalid input JSON")
    return JSONResponse(error_body(request, err), status_code=err.status_code)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    log.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    err = ConflictError("Resource already exists or violates a constraint")
    return JSONResponse(error_body(request, err), status_code=err.status_code)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    log.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    err = StoreError("Store operation failed")
    return JSONResponse(error_body(request, err), status_code=err.status_code)


# Import and register routers
from .routers import (  # noqa: E402
    admin, associations, exports, health, imports, lists, objects, owners, pipelines,
    properties, schemas,
)

app.include_router(objects.router)
app.include_router(associations.router)
app.include_router(schemas.router)
app.include_router(properties.router)
app.include_router(pipelines.router)
app.include_router(owners.router)
app.include_router(lists.router)
app.include_router(imports.router)
app.include_router(exports.router)
app.include_router(admin.router)
app.include_router(health.router)
