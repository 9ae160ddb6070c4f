from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geofence.model import Coordinate
from .model import CooldownRecord, SubmissionRecord
from .repository import CooldownRepository, SubmissionRepository


class MySQLCooldownRepository(CooldownRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, device_key: str, scope: str) -> Optional[CooldownRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT device_key, scope, last_accepted_at FROM cooldown_records WHERE device_key=%s AND scope=%s",
                (device_key, scope),
            )
            r = fetchone(cur)
        if not r:
            return None
        return CooldownRecord(
            device_key=r["device_key"],
            scope=r["scope"],
            last_accepted_at=float(r["last_accepted_at"]),
        )

    def put(self, record: CooldownRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cooldown_records(device_key, scope, last_accepted_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE last_accepted_at=VALUES(last_accepted_at)
                """,
                (record.device_key, record.scope, record.last_accepted_at),
            )


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(
        self,
        *,
        course_id: Optional[str],
        device_key: str,
        submitted_at: float,
        coordinate: Optional[Coordinate],
        values: Mapping[str, Any],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_submissions(course_id, device_key, submitted_at, latitude, longitude, values_json)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    course_id,
                    device_key,
                    submitted_at,
                    coordinate.latitude if coordinate else None,
                    coordinate.longitude if coordinate else None,
                    json.dumps(dict(values), ensure_ascii=False, default=str),
                ),
            )
            return int(cur.lastrowid or 0)

    def list_for_course(self, course_id: str, *, limit: int = 200) -> Sequence[SubmissionRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT submission_id, course_id, device_key, submitted_at, latitude, longitude, values_json
                FROM attendance_submissions
                WHERE course_id=%s
                ORDER BY submitted_at DESC
                LIMIT %s
                """,
                (course_id, int(limit)),
            )
            rows = fetchall(cur)

        out: list[SubmissionRecord] = []
        for r in rows:
            coordinate = None
            if r.get("latitude") is not None and r.get("longitude") is not None:
                coordinate = Coordinate(latitude=float(r["latitude"]), longitude=float(r["longitude"]))
            out.append(
                SubmissionRecord(
                    submission_id=int(r["submission_id"]),
                    course_id=r.get("course_id"),
                    device_key=r["device_key"],
                    submitted_at=float(r["submitted_at"]),
                    coordinate=coordinate,
                    values=json.loads(r["values_json"] or "{}"),
                )
            )
        return out
