"""
API endpoints
"""
from .routes import router
from .auth_routes import router as auth_router
from .customer_routes import router as customer_router
from .report_routes import router as report_router
from .communication_routes import router as communication_router
from .health_routes import router as health_router

__all__ = [
    "router",
    "auth_router",
    "customer_router",
    "report_router",
    "communication_router",
    "health_router",
]
