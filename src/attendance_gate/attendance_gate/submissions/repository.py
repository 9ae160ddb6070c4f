from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..geofence.model import Coordinate
from .model import CooldownRecord, SubmissionRecord


class CooldownRepository(Protocol):
    def get(self, device_key: str, scope: str) -> Optional[CooldownRecord]:
        raise NotImplementedError

    def put(self, record: CooldownRecord) -> None:
        """Insert or overwrite the record for ``(device_key, scope)``."""

        raise NotImplementedError


class SubmissionRepository(Protocol):
    def add(
        self,
        *,
        course_id: Optional[str],
        device_key: str,
        submitted_at: float,
        coordinate: Optional[Coordinate],
        values: Mapping[str, Any],
    ) -> int:
        raise NotImplementedError

    def list_for_course(self, course_id: str, *, limit: int = 200) -> Sequence[SubmissionRecord]:
        raise NotImplementedError
