"""Site settings: language-resolved marketing copy and contact details."""

import logging
from collections.abc import Mapping
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import MemoryCache
from ..core.clock import Clock, system_clock
from ..core.config import settings
from ..core.exceptions import ValidationError, raise_persistence_error
from ..models.reservation import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from ..models.site_setting import SiteSetting
from .cache_invalidation import CacheInvalidator, site_settings_key

logger = logging.getLogger(__name__)

HERO_DESCRIPTIONS = {
    "hero_badge": "Homepage badge text",
    "hero_title": "Homepage title (line 1)",
    "hero_subtitle": "Homepage title (line 2)",
    "hero_description": "Homepage description",
}

CONTACT_DESCRIPTIONS = {
    "CompanyName": "Company name",
    "Phone": "Phone",
    "Email": "Email",
    "Address": "Address",
    "WhatsApp": "WhatsApp number",
    "Instagram": "Instagram handle",
    "Facebook": "Facebook page",
}

LANGUAGE_NAMES = {"tr": "Türkçe", "de": "Deutsch", "ru": "Русский", "en": "English"}


def split_language_suffix(key: str) -> tuple[str, Optional[str]]:
    """Split ``hero_title_de`` into (``hero_title``, ``de``); keys without a known suffix return (key, None)."""
    for lang in SUPPORTED_LANGUAGES:
        suffix = f"_{lang}"
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)], lang
    return key, None


def resolve_settings(rows: Mapping[str, str], lang: str) -> dict[str, str]:
    """
    Flatten every stored setting into the view of one language.

    Plain keys are kept, ``<key>_<lang>`` overrides ``<key>``, and keys
    suffixed with any other supported language are dropped.
    """
    general: dict[str, str] = {}
    localized: dict[str, str] = {}
    for key, value in rows.items():
        base, key_lang = split_language_suffix(key)
        if key_lang is None:
            general[key] = value
        elif key_lang == lang:
            localized[base] = value

    result = dict(general)
    result.update(localized)
    return result


def describe_setting(key: str) -> str:
    """Description stored with a newly created setting."""
    base, lang = split_language_suffix(key)
    if key.startswith("hero_"):
        if base not in HERO_DESCRIPTIONS:
            return key
        if lang is None:
            return HERO_DESCRIPTIONS[base]
        return f"{HERO_DESCRIPTIONS[base]} ({LANGUAGE_NAMES[lang]})"
    return CONTACT_DESCRIPTIONS.get(key, key)


class SettingsService:
    """Reads and writes the site_settings table."""

    def __init__(
        self,
        db: AsyncSession,
        cache: MemoryCache,
        invalidator: Optional[CacheInvalidator] = None,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.cache = cache
        self.invalidator = invalidator
        self.clock = clock or system_clock

    async def get_settings(self, lang: Optional[str] = None) -> dict[str, str]:
        """
        Settings as seen by one language, cached per language.

        Args:
            lang: Two-letter code; unsupported values fall back to the default language

        Returns:
            A fresh dict the caller may modify
        """
        code = (lang or DEFAULT_LANGUAGE).lower()
        if code not in SUPPORTED_LANGUAGES:
            code = DEFAULT_LANGUAGE

        async def load():
            result = await self.db.execute(select(SiteSetting.key, SiteSetting.value))
            rows = {key: value or "" for key, value in result.all()}
            return tuple(resolve_settings(rows, code).items())

        cached = await self.cache.get_or_create(
            site_settings_key(code), settings.settings_cache_ttl_seconds, load
        )
        return dict(cached)

    async def update_settings(self, values: Mapping[str, str]) -> int:
        """
        Upsert every key/value pair in one transaction.

        Returns:
            Number of settings written

        Raises:
            ValidationError: If values is empty or contains a blank key
        """
        if not values:
            raise ValidationError(
                detail="No settings were submitted",
                errors={"values": "At least one setting is required"}
            )
        blank = [key for key in values if not key or not key.strip()]
        if blank:
            raise ValidationError(
                detail="Setting keys cannot be blank",
                errors={"values": "Setting keys cannot be blank"}
            )

        now = self.clock.now_utc()
        try:
            result = await self.db.execute(
                select(SiteSetting).where(SiteSetting.key.in_(list(values)))
            )
            existing = {row.key: row for row in result.scalars()}

            for key, value in values.items():
                row = existing.get(key)
                if row is None:
                    self.db.add(SiteSetting(
                        key=key,
                        value=value or "",
                        description=describe_setting(key),
                        updated_at=now,
                    ))
                else:
                    row.value = value or ""
                    row.updated_at = now

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise_persistence_error(e, {"operation": "update_settings", "keys": list(values)})

        if self.invalidator is not None:
            await self.invalidator.invalidate_site_settings()
        else:
            self.cache.remove_many(site_settings_key(lang) for lang in SUPPORTED_LANGUAGES)

        logger.info("Site settings updated", extra={"count": len(values)})
        return len(values)
