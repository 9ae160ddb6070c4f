from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import elapsed_minutes
from ..core.exceptions import InvalidCoordinate, NoZoneConfigured
from ..geofence.model import LocationConfig
from ..geofence.validator import GeofenceValidator
from .model import CooldownRecord, Decision, RejectedCooldown, RejectedOutsideZone, SubmissionAttempt


@dataclass(frozen=True)
class GateContext:
    zone: Optional[LocationConfig]
    cooldown_window_minutes: float
    prior_record: Optional[CooldownRecord]
    scope: str


class SubmissionGuard(ABC):
    """Strategy Pattern: one independent check a submission must pass.

    ``check`` returns a rejection, or ``None`` to let the attempt through.
    """

    @abstractmethod
    def check(self, attempt: SubmissionAttempt, ctx: GateContext) -> Optional[Decision]:
        raise NotImplementedError


class GeofenceGuard(SubmissionGuard):
    def __init__(self, validator: GeofenceValidator | None = None):
        self._validator = validator or GeofenceValidator()

    def check(self, attempt: SubmissionAttempt, ctx: GateContext) -> Optional[Decision]:
        if attempt.coordinate is None:
            raise InvalidCoordinate("No device coordinate supplied")
        if ctx.zone is None:
            raise NoZoneConfigured(attempt.course_id)

        result = self._validator.evaluate(attempt.coordinate, ctx.zone)
        if not result.within_zone:
            return RejectedOutsideZone(
                distance_km=result.distance_km,
                radius_km=ctx.zone.radius_km,
                zone_label=ctx.zone.label,
            )
        return None


class CooldownGuard(SubmissionGuard):
    def check(self, attempt: SubmissionAttempt, ctx: GateContext) -> Optional[Decision]:
        prior = ctx.prior_record
        if prior is None:
            return None

        # A timestamp before the prior acceptance (clock skew) counts as zero elapsed.
        elapsed = max(0.0, elapsed_minutes(prior.last_accepted_at, attempt.timestamp))
        window = ctx.cooldown_window_minutes
        if elapsed < window:
            return RejectedCooldown(remaining_minutes=window - elapsed, window_minutes=window)
        return None
