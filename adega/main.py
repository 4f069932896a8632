"""
Main FastAPI application.
- Preflight database test on startup
- Business routes under /api
- Every error leaves as {"error": kind, "message": text}
"""
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text
from contextlib import asynccontextmanager
import logging

from adega.config import settings
from adega.database import Base, engine, get_db, test_connection
from adega.exceptions import AdegaError, Conflict, InvalidArgument, Internal
from adega import models  # noqa: F401  registers tables on Base.metadata
from adega.routers import (
    clients_router, products_router, users_router, consignments_router,
    stock_counts_router, client_stock_router, inventory_router, dashboard_router,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Preflight database test, then make sure the tables exist"""
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")

    logger.info("Running preflight database test...")
    success, message = test_connection()
    if not success:
        logger.error(f"Preflight test failed: {message}")
    else:
        logger.info(f"Preflight test passed: {message}")

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified")
    except SQLAlchemyError as e:
        logger.warning(f"Database table creation: {e}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Wine consignment stock reconciliation",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(error: AdegaError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(AdegaError)
async def adega_error_handler(request: Request, exc: AdegaError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return _error_response(InvalidArgument(message))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"{request.method} {request.url.path}: integrity error {exc.orig}")
    return _error_response(Conflict("Operation conflicts with existing data"))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path}: database error {exc}")
    return _error_response(Internal("Internal server error"))


# Include routers
for router in (
    clients_router,
    products_router,
    users_router,
    consignments_router,
    stock_counts_router,
    client_stock_router,
    inventory_router,
    dashboard_router,
):
    app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    System health check.
    Reports database status, never fails when the database is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {str(e)}"
        logger.warning(f"Health check database error: {e}")

    return {
        "status": "healthy",
        "service": "adega-consignment",
        "database": db_status,
        "version": settings.APP_VERSION,
    }


@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "docs": "/api/docs",
            "health": "/health",
            "api": "/api"
        }
    }
