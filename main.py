"""
Main FastAPI application for the repair shop service desk
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from repairdesk import __version__
from repairdesk.config import settings
from repairdesk.database import ensure_indexes, close_connection
from repairdesk.api import (
    router,
    auth_router,
    customer_router,
    report_router,
    communication_router,
    health_router,
)
from repairdesk.utils.http_client import cleanup_http_clients
from repairdesk.utils.secure_logging import configure_secure_logging
from repairdesk.middleware.rate_limiter import limiter
from repairdesk.middleware.cors import get_cors_origins
from repairdesk.security.error_handler import SecureError, secure_exception_handler

# Configure secure logging (masks tokens, passwords and customer contact data)
configure_secure_logging(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format_type=settings.log_format,
    include_trace_id=True,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info("Starting repair desk API...")

    await ensure_indexes()
    logger.info("Database indexes created/verified")

    yield

    # Shutdown
    logger.info("Shutting down...")

    await cleanup_http_clients()
    logger.info("HTTP clients closed")

    await close_connection()
    logger.info("Database connection closed")


# Create FastAPI app
app = FastAPI(
    title="Repair Desk",
    description="Service desk for a repair shop: tickets, customers, technicians and reports",
    version=__version__,
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add exception handler for rate limit exceeded
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add SlowAPI middleware
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware (shop front end plus extra origins, loopback dropped in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,  # Cache preflight requests for 10 minutes
)

# Error bodies never expose internal details
app.add_exception_handler(SecureError, secure_exception_handler)
app.add_exception_handler(StarletteHTTPException, secure_exception_handler)
app.add_exception_handler(Exception, secure_exception_handler)

# Include routes
app.include_router(health_router)  # Health checks (no auth required)
app.include_router(auth_router)
app.include_router(router)
app.include_router(customer_router)
app.include_router(report_router)
app.include_router(communication_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Repair Desk",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "login": "POST /api/auth/login",
            "create_ticket": "POST /api/tickets",
            "list_tickets": "GET /api/tickets",
            "get_ticket": "GET /api/tickets/{ticket_id}",
            "update_status": "PATCH /api/tickets/{ticket_id}/status",
            "customers": "GET|POST /api/customers",
            "stats": "GET /api/stats",
            "reports": "GET /api/reports",
            "send_message": "POST /api/communication/send",
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload
    )
