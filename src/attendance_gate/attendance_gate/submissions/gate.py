from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_finite
from ..core.constants import DEFAULT_COOLDOWN_MINUTES, GLOBAL_SCOPE
from ..core.exceptions import NoZoneConfigured, ValidationError
from ..geofence.model import LocationConfig
from .guards import CooldownGuard, GateContext, GeofenceGuard, SubmissionGuard
from .model import Accepted, CooldownRecord, Decision, SubmissionAttempt


class SubmissionGate:
    """Accept or reject one submission attempt.

    Guards run in order and the first rejection wins: geofence first, so an
    attempt from outside the zone never reaches the cooldown check.

    ``decide`` is deterministic for a given ``prior_record`` snapshot.
    Storing the returned record is the caller's job, and so is serializing
    concurrent check-then-store sequences for the same device and scope.
    """

    def __init__(
        self,
        *,
        per_course_cooldown: bool = False,
        geofence_guard: SubmissionGuard | None = None,
        cooldown_guard: SubmissionGuard | None = None,
    ):
        self._per_course = bool(per_course_cooldown)
        self._geofence = geofence_guard or GeofenceGuard()
        self._cooldown = cooldown_guard or CooldownGuard()

    def scope_for(self, attempt: SubmissionAttempt) -> str:
        if self._per_course and attempt.course_id:
            return str(attempt.course_id)
        return GLOBAL_SCOPE

    def decide(
        self,
        attempt: SubmissionAttempt,
        zone: Optional[LocationConfig],
        cooldown_window_minutes: float = DEFAULT_COOLDOWN_MINUTES,
        prior_record: Optional[CooldownRecord] = None,
        *,
        bypass_geofence: bool = False,
    ) -> Decision:
        """Run the guards.

        ``bypass_geofence`` is the explicit development override; without it a
        missing zone raises ``NoZoneConfigured`` instead of permitting.
        """
        if not attempt.device_key:
            raise ValidationError("device_key is required")
        require_finite(attempt.timestamp, "timestamp")
        window = require_finite(cooldown_window_minutes, "cooldown window")
        if window < 0:
            raise ValidationError("cooldown window must be a non-negative number of minutes")
        if zone is None and not bypass_geofence:
            raise NoZoneConfigured(attempt.course_id)

        scope = self.scope_for(attempt)
        if prior_record is not None and (
            prior_record.device_key != attempt.device_key or prior_record.scope != scope
        ):
            raise ValidationError("Cooldown record belongs to another device or scope")

        ctx = GateContext(zone=zone, cooldown_window_minutes=window, prior_record=prior_record, scope=scope)
        for guard in self._guards(bypass_geofence):
            rejection = guard.check(attempt, ctx)
            if rejection is not None:
                return rejection

        return Accepted(
            record=CooldownRecord(
                device_key=attempt.device_key,
                scope=scope,
                last_accepted_at=float(attempt.timestamp),
            )
        )

    def _guards(self, bypass_geofence: bool) -> Sequence[SubmissionGuard]:
        if bypass_geofence:
            return (self._cooldown,)
        return (self._geofence, self._cooldown)
