from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from ..common.datetime_utils import epoch_seconds, format_epoch
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_COOLDOWN_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..forms.service import FormConfigService
from ..geofence.model import Coordinate
from ..geofence.service import LocationSettingsService
from .gate import SubmissionGate
from .model import Accepted, Decision, SubmissionAttempt
from .repository import CooldownRepository, SubmissionRepository
from .row_format import build_headers, build_row

logger = logging.getLogger(__name__)


class _KeyedLocks:
    """One lock per key, so check-then-store runs serially per device scope.

    An entry lives only while some caller holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], list] = {}

    @contextmanager
    def hold(self, key: tuple[str, str]) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


@dataclass(frozen=True)
class SubmissionResult:
    decision: Decision
    submission_id: Optional[int] = None
    values: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out = self.decision.to_dict()
        out["submission_id"] = self.submission_id
        return out


class SubmissionService:
    """Validate, gate and store one attendance submission.

    The server clock stamps attempts; client-sent times are not used.
    """

    def __init__(
        self,
        gate: SubmissionGate,
        forms: FormConfigService,
        locations: LocationSettingsService,
        cooldowns: CooldownRepository,
        submissions: SubmissionRepository,
        *,
        cooldown_minutes: float = DEFAULT_COOLDOWN_MINUTES,
        bypass_geofence: bool = False,
        clock: Callable[[], float] | None = None,
    ):
        self._gate = gate
        self._forms = forms
        self._locations = locations
        self._cooldowns = cooldowns
        self._submissions = submissions
        self._cooldown_minutes = float(cooldown_minutes)
        self._bypass_geofence = bool(bypass_geofence)
        self._clock = clock or epoch_seconds
        self._locks = _KeyedLocks()
        if self._bypass_geofence:
            logger.warning("geofence bypass is ON; location checks are skipped")

    def submit(
        self,
        *,
        course_id: Optional[str],
        device_key: str,
        values: Mapping[str, Any],
        coordinate: Optional[Coordinate],
        now: Optional[float] = None,
    ) -> SubmissionResult:
        device_key = require_non_empty(device_key, "device_key")
        form_id = course_id or "default"
        cleaned = self._forms.compiled_form(form_id).schema.validate(values)

        zone = None if self._bypass_geofence else self._locations.resolve_zone(course_id)
        attempt = SubmissionAttempt(
            device_key=device_key,
            course_id=course_id,
            timestamp=self._clock() if now is None else float(now),
            coordinate=coordinate,
            field_values=cleaned,
        )
        scope = self._gate.scope_for(attempt)

        with self._locks.hold((device_key, scope)):
            prior = self._cooldowns.get(device_key, scope)
            decision = self._gate.decide(
                attempt,
                zone,
                self._cooldown_minutes,
                prior,
                bypass_geofence=self._bypass_geofence,
            )
            if not isinstance(decision, Accepted):
                logger.info(
                    "submission rejected course=%s scope=%s kind=%s",
                    course_id,
                    scope,
                    decision.kind.value,
                )
                return SubmissionResult(decision=decision, values=cleaned)

            submission_id = self._submissions.add(
                course_id=course_id,
                device_key=device_key,
                submitted_at=attempt.timestamp,
                coordinate=coordinate,
                values=cleaned,
            )
            # Only a stored submission starts the cooldown.
            self._cooldowns.put(decision.record)

        logger.info("submission accepted id=%s course=%s scope=%s", submission_id, course_id, scope)
        return SubmissionResult(decision=decision, submission_id=submission_id, values=cleaned)

    def export_rows(self, *, current_role: Role, course_id: str, limit: int = 200) -> dict[str, Any]:
        """Accepted submissions for a course as spreadsheet headers and rows.

        Columns follow the course's current form, so values for fields
        removed since submission are not shown.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can list submissions")
        course_id = require_non_empty(course_id, "course_id")
        fields = self._forms.unified_fields(course_id)
        records = self._submissions.list_for_course(course_id, limit=limit)
        return {
            "headers": build_headers(fields),
            "rows": [
                build_row(
                    r.values,
                    fields,
                    record_id=str(r.submission_id),
                    created_at=format_epoch(r.submitted_at),
                    coordinate=r.coordinate,
                )
                for r in records
            ],
        }
