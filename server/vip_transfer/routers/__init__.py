"""FastAPI routers package."""

from .admin_catalog import router as admin_catalog_router
from .admin_reservations import router as admin_reservations_router
from .admin_settings import router as admin_settings_router
from .catalog import router as catalog_router
from .health import router as health_router
from .metrics import router as metrics_router
from .reservation import router as reservation_router

__all__ = [
    "admin_catalog_router",
    "admin_reservations_router",
    "admin_settings_router",
    "catalog_router",
    "health_router",
    "metrics_router",
    "reservation_router",
]
