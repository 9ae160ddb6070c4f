from __future__ import annotations

from typing import Optional

from ..core.constants import GLOBAL_SCOPE
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import LocationConfig
from .repository import LocationConfigRepository


def _course_scope(course_id: str) -> str:
    return f"course:{course_id}"


class MySQLLocationRepository(LocationConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, scope: str) -> Optional[LocationConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT latitude, longitude, radius_km, label FROM location_settings WHERE scope=%s",
                (scope,),
            )
            r = fetchone(cur)
        if not r:
            return None
        return LocationConfig(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            radius_km=float(r["radius_km"]),
            label=r.get("label") or "",
        )

    def _save(self, scope: str, config: LocationConfig) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO location_settings(scope, latitude, longitude, radius_km, label)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE latitude=VALUES(latitude), longitude=VALUES(longitude),
                    radius_km=VALUES(radius_km), label=VALUES(label)
                """,
                (scope, config.latitude, config.longitude, config.radius_km, config.label),
            )

    def get_global(self) -> Optional[LocationConfig]:
        return self._get(GLOBAL_SCOPE)

    def save_global(self, config: LocationConfig) -> None:
        self._save(GLOBAL_SCOPE, config)

    def get_for_course(self, course_id: str) -> Optional[LocationConfig]:
        return self._get(_course_scope(course_id))

    def save_for_course(self, course_id: str, config: LocationConfig) -> None:
        self._save(_course_scope(course_id), config)

    def delete_for_course(self, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM location_settings WHERE scope=%s", (_course_scope(course_id),))
            return cur.rowcount > 0
