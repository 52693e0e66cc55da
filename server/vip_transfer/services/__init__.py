"""Business logic services."""

from .cache_invalidation import CacheInvalidator
from .catalog_admin_service import CatalogAdminService
from .catalog_service import CatalogService
from .rate_service import RateService
from .reservation_service import ReservationService
from .settings_service import SettingsService

__all__ = [
    "CacheInvalidator",
    "CatalogAdminService",
    "CatalogService",
    "RateService",
    "ReservationService",
    "SettingsService",
]
