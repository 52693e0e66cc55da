"""Cache invalidation coordinator for admin mutations.

Each category clears exactly the in-process keys and output-cache tags that
can hold its data. Output-cache eviction is best-effort: a failure is logged
as a warning and the admin operation still succeeds.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from ..core.cache import MemoryCache, OutputCache
from ..core.observability import metrics_collector
from ..models.reservation import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

# In-process keys
HOMEPAGE_REGIONS = "homepage_regions"
HOMEPAGE_REGIONS_FORM = "homepage_all_regions_form"
REGIONS_ALL = "regions_all"
REGIONS_ALPHABETIC = "regions_all_alphabetic"
REGIONS_ACTIVE = "regions_all_active"
VEHICLES_ACTIVE = "vehicles_all_active"
HOMEPAGE_VEHICLES = "homepage_vehicles"
HOMEPAGE_HERO = "homepage_hero"
SITE_SETTINGS_PREFIX = "site_settings_"

# Output-cache tags
TAG_HOMEPAGE = "homepage"
TAG_REGIONS = "regions"
TAG_VEHICLES = "vehicles"
TAG_GALLERY = "gallery"
TAG_STATIC = "static"


def region_key(region_id: int) -> str:
    return f"region_{region_id}"


def region_detail_key(region_id: int) -> str:
    return f"region_detail_{region_id}"


def vehicle_key(vehicle_id: int) -> str:
    return f"vehicle_{vehicle_id}"


def vehicle_detail_key(vehicle_id: int) -> str:
    return f"vehicle_detail_{vehicle_id}"


def site_settings_key(lang: str) -> str:
    return f"{SITE_SETTINGS_PREFIX}{lang}"


class CacheInvalidator:
    """Walks every cache tier that may hold stale data for a content category."""

    def __init__(self, cache: MemoryCache, output_cache: OutputCache):
        self.cache = cache
        self.output_cache = output_cache

    async def invalidate_regions(self, region_id: Optional[int] = None) -> None:
        """
        Clear region lists, the homepage region blocks and, when given, one region's keys.

        Args:
            region_id: Region that was created, edited, toggled or deleted
        """
        keys = [
            HOMEPAGE_REGIONS,
            HOMEPAGE_REGIONS_FORM,
            REGIONS_ALL,
            REGIONS_ALPHABETIC,
            REGIONS_ACTIVE,
        ]
        if region_id is not None:
            keys += [region_detail_key(region_id), region_key(region_id)]

        self.cache.remove_many(keys)
        metrics_collector.record_invalidation("regions")
        await self._evict_tags((TAG_REGIONS, TAG_HOMEPAGE), category="regions")

    async def invalidate_vehicles(self, vehicle_id: Optional[int] = None) -> None:
        """
        Clear the active vehicle list and the homepage teaser.

        Vehicle pages in the output cache are left to expire on their own TTL.
        """
        keys = [VEHICLES_ACTIVE, HOMEPAGE_VEHICLES]
        if vehicle_id is not None:
            keys += [vehicle_key(vehicle_id), vehicle_detail_key(vehicle_id)]

        self.cache.remove_many(keys)
        metrics_collector.record_invalidation("vehicles")
        logger.info(
            "Vehicle caches invalidated",
            extra={"vehicle_id": vehicle_id}
        )

    async def invalidate_hero(self) -> None:
        self.cache.remove(HOMEPAGE_HERO)
        metrics_collector.record_invalidation("hero")
        await self._evict_tags((TAG_HOMEPAGE,), category="hero")

    async def invalidate_rates(self) -> None:
        """Displayed prices depend on rates, so every price-bearing page group is evicted."""
        metrics_collector.record_invalidation("rates")
        await self._evict_tags(
            (TAG_HOMEPAGE, TAG_REGIONS, TAG_VEHICLES, TAG_GALLERY, TAG_STATIC),
            category="rates",
        )

    async def invalidate_site_settings(self) -> None:
        self.cache.remove_many(site_settings_key(lang) for lang in SUPPORTED_LANGUAGES)
        metrics_collector.record_invalidation("site_settings")
        await self._evict_tags((TAG_HOMEPAGE, TAG_STATIC), category="site_settings")

    async def _evict_tags(self, tags: Iterable[str], category: str) -> None:
        for tag in tags:
            try:
                await self.output_cache.evict_by_tag(tag)
            except Exception as e:
                logger.warning(
                    "Output cache eviction failed",
                    extra={"category": category, "tag": tag, "error": str(e)}
                )
