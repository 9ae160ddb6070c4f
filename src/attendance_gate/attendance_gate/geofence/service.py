from __future__ import annotations

import logging
from typing import Optional

from ..common.cache import TTLCache, cache_key
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import LocationConfig
from .repository import LocationConfigRepository
from .validator import GeofenceValidator

logger = logging.getLogger(__name__)

_GLOBAL_KEY = cache_key("location-settings", "global")


class LocationSettingsService:
    """Global and per-course zones, with cached lookups.

    ``fallback`` is a deployment-configured zone used only when nothing is
    stored; without it, an unconfigured course raises ``NoZoneConfigured``.
    """

    def __init__(
        self,
        locations: LocationConfigRepository,
        *,
        validator: GeofenceValidator | None = None,
        cache: TTLCache | None = None,
        fallback: Optional[LocationConfig] = None,
    ):
        self._locations = locations
        self._validator = validator or GeofenceValidator()
        self._cache = cache
        self._fallback = fallback

    def _cached(self, key: str, load):
        if self._cache is None:
            return load()
        hit = self._cache.get(key)
        if hit is not None:
            # Misses are cached as False so an empty store is not re-queried.
            return hit or None
        value = load()
        self._cache.set(key, value if value is not None else False)
        return value

    def get_global(self) -> Optional[LocationConfig]:
        return self._cached(_GLOBAL_KEY, self._locations.get_global)

    def get_course_override(self, course_id: str) -> Optional[LocationConfig]:
        course_id = require_non_empty(course_id, "course_id")
        return self._cached(
            cache_key("location-settings", "course", course_id),
            lambda: self._locations.get_for_course(course_id),
        )

    def save_global(self, *, current_role: Role, config: LocationConfig) -> LocationConfig:
        self._require_admin(current_role)
        self._locations.save_global(config)
        self._invalidate(_GLOBAL_KEY)
        logger.info(
            "global zone saved lat=%.7f lon=%.7f radius_km=%s label=%r",
            config.latitude,
            config.longitude,
            config.radius_km,
            config.label,
        )
        return config

    def save_course_override(self, *, current_role: Role, course_id: str, config: LocationConfig) -> LocationConfig:
        self._require_admin(current_role)
        course_id = require_non_empty(course_id, "course_id")
        self._locations.save_for_course(course_id, config)
        self._invalidate(cache_key("location-settings", "course", course_id))
        logger.info("zone override saved course=%s radius_km=%s", course_id, config.radius_km)
        return config

    def clear_course_override(self, *, current_role: Role, course_id: str) -> bool:
        self._require_admin(current_role)
        course_id = require_non_empty(course_id, "course_id")
        removed = self._locations.delete_for_course(course_id)
        self._invalidate(cache_key("location-settings", "course", course_id))
        return removed

    def resolve_zone(self, course_id: Optional[str]) -> LocationConfig:
        override = self.get_course_override(course_id) if course_id else None
        return self._validator.resolve_zone(
            override,
            self.get_global() or self._fallback,
            course_id=course_id,
        )

    def _invalidate(self, key: str) -> None:
        if self._cache is not None:
            self._cache.invalidate(key)
            logger.debug("cache invalidated %s", key)

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change location settings")
