"""
API Routes Module
"""
from .health import router as health_router
from .session import router as session_router
from .reference import router as reference_router
from .dashboard import router as dashboard_router
from .summary import router as summary_router
from .management import router as management_router

__all__ = [
    "health_router",
    "session_router",
    "reference_router",
    "dashboard_router",
    "summary_router",
    "management_router",
]
