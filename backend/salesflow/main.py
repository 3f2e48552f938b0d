"""FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import settings
from .database import init_db
from .domain_errors import DomainError
from .problem_details import domain_error_handler
from .routers import auth, catalog, notifications, orders, reports, users

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


# Create app
app = FastAPI(
    title="SalesFlow Order Approval",
    version="1.0.0",
    description="Backend API for the SalesFlow sales order approval workflow",
    lifespan=lifespan,
)

# Production safety checks.
if settings.ENV.lower() == "production" and settings.JWT_SECRET_KEY == "change-me-in-production":
    raise RuntimeError("JWT_SECRET_KEY must be set in production.")
if settings.ENV.lower() == "production" and any(origin.strip() == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"] if settings.ENV.lower() == "production" else ["*"],
)

app.add_exception_handler(DomainError, domain_error_handler)


# Include routers
app.include_router(auth.router, prefix="/api/v1")
app.include_router(orders.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")


@app.get("/api/v1/system/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "state_key": settings.STATE_KEY,
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "SalesFlow Order Approval API",
        "version": "1.0.0",
        "docs": "/docs"
    }
