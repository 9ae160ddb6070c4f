from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .common.cache import TTLCache
from .core.constants import (
    DEFAULT_COOLDOWN_MINUTES,
    FORM_CONFIG_CACHE_TTL_SECONDS,
    LOCATION_CACHE_TTL_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .forms.mysql_form_config_repository import MySQLFormConfigRepository
from .forms.repository import FormConfigRepository
from .forms.service import FormConfigService
from .geofence.model import LocationConfig
from .geofence.mysql_location_repository import MySQLLocationRepository
from .geofence.repository import LocationConfigRepository
from .geofence.service import LocationSettingsService
from .submissions.gate import SubmissionGate
from .submissions.mysql_submission_repository import MySQLCooldownRepository, MySQLSubmissionRepository
from .submissions.repository import CooldownRepository, SubmissionRepository
from .submissions.service import SubmissionService


@dataclass(frozen=True)
class ServiceSettings:
    cooldown_minutes: float = DEFAULT_COOLDOWN_MINUTES
    per_course_cooldown: bool = False
    bypass_geofence: bool = False
    default_location: Optional[LocationConfig] = None
    form_cache_ttl: float = FORM_CONFIG_CACHE_TTL_SECONDS
    location_cache_ttl: float = LOCATION_CACHE_TTL_SECONDS

    @classmethod
    def from_settings(cls, settings: Any) -> "ServiceSettings":
        default_location = getattr(settings, "DEFAULT_LOCATION", None)
        return cls(
            cooldown_minutes=float(getattr(settings, "COOLDOWN_MINUTES", DEFAULT_COOLDOWN_MINUTES)),
            per_course_cooldown=bool(getattr(settings, "COOLDOWN_PER_COURSE", False)),
            bypass_geofence=bool(getattr(settings, "GEOFENCE_BYPASS", False)),
            default_location=LocationConfig.from_dict(default_location) if default_location else None,
            form_cache_ttl=float(getattr(settings, "FORM_CONFIG_CACHE_TTL", FORM_CONFIG_CACHE_TTL_SECONDS)),
            location_cache_ttl=float(getattr(settings, "LOCATION_CACHE_TTL", LOCATION_CACHE_TTL_SECONDS)),
        )


@dataclass(frozen=True)
class Container:
    form_config_service: FormConfigService
    location_service: LocationSettingsService
    submission_service: SubmissionService
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    form_configs: FormConfigRepository,
    locations: LocationConfigRepository,
    cooldowns: CooldownRepository,
    submissions: SubmissionRepository,
    settings: ServiceSettings | None = None,
    clock: Callable[[], float] | None = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    settings = settings or ServiceSettings()

    form_config_service = FormConfigService(
        form_configs,
        cache=TTLCache(settings.form_cache_ttl, clock=clock),
    )
    location_service = LocationSettingsService(
        locations,
        cache=TTLCache(settings.location_cache_ttl, clock=clock),
        fallback=settings.default_location,
    )
    submission_service = SubmissionService(
        SubmissionGate(per_course_cooldown=settings.per_course_cooldown),
        form_config_service,
        location_service,
        cooldowns,
        submissions,
        cooldown_minutes=settings.cooldown_minutes,
        bypass_geofence=settings.bypass_geofence,
        clock=clock,
    )
    return Container(
        form_config_service=form_config_service,
        location_service=location_service,
        submission_service=submission_service,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: ServiceSettings | None = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return build_services(
        form_configs=MySQLFormConfigRepository(conn),
        locations=MySQLLocationRepository(conn),
        cooldowns=MySQLCooldownRepository(conn),
        submissions=MySQLSubmissionRepository(conn),
        settings=settings,
        conn=conn,
    )
