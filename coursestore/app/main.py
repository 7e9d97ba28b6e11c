"""
FastAPI Application Entry Point.

This is the main application file for the Course Store Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from coursestore.app.core.config import settings
from coursestore.app.core.observability import ObservabilityMiddleware
from coursestore.app.core.redis_client import ping_redis, close_redis
from coursestore.app.api.v1.router import router as api_v1_router
from coursestore.app.db.session import engine, init_models
from coursestore.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from coursestore.app.models.user import User
from coursestore.app.models.audit_log import AuditLog
from coursestore.app.models.category import Category
from coursestore.app.models.course import Course
from coursestore.app.models.schedule import Schedule, ScheduleCourse
from coursestore.app.models.payment_method import PaymentMethod
from coursestore.app.models.cart_line import CartLine
from coursestore.app.models.invoice import Invoice, InvoiceDetail

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates missing tables on startup; releases the database pool and the
    Redis connection on shutdown.
    """
    await init_models()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Course storefront backend: catalog, cart, checkout and invoices",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Redis only backs logout, so an unreachable Redis is reported, not fatal.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await ping_redis() else "down",
    }


app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """Welcome message and API documentation links."""
    return {
        "message": "Welcome to the Course Store API",
        "docs": "/docs",
        "health": "/health",
    }
