from __future__ import annotations

import json
import logging
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import FormConfig
from .repository import FormConfigRepository

logger = logging.getLogger(__name__)


class MySQLFormConfigRepository(FormConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, course_id: str) -> Optional[FormConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT config_json FROM course_form_configs WHERE course_id=%s", (course_id,))
            r = fetchone(cur)
        if not r:
            return None
        try:
            data = json.loads(r["config_json"] or "{}")
        except json.JSONDecodeError:
            logger.warning("unreadable form config for course %s, using defaults", course_id)
            return None
        return FormConfig.from_dict(data)

    def save(self, course_id: str, config: FormConfig) -> None:
        payload = json.dumps(config.to_dict(), ensure_ascii=False)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO course_form_configs(course_id, config_json)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE config_json=VALUES(config_json)
                """,
                (course_id, payload),
            )
