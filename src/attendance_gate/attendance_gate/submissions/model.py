from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..core.enums import DecisionKind
from ..geofence.model import Coordinate


@dataclass(frozen=True)
class SubmissionAttempt:
    """One submit press. Timestamps are epoch seconds chosen by the caller.

    ``device_key`` is client supplied and only scopes the cooldown; it is not
    a trust anchor.
    """

    device_key: str
    course_id: Optional[str]
    timestamp: float
    coordinate: Optional[Coordinate] = None
    field_values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CooldownRecord:
    device_key: str
    scope: str
    last_accepted_at: float

    def to_dict(self) -> dict[str, Any]:
        return {"device_key": self.device_key, "scope": self.scope, "last_accepted_at": self.last_accepted_at}


def _format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{distance_km * 1000:.0f} m"
    return f"{distance_km:.1f} km"


@dataclass(frozen=True)
class Decision:
    """Base of the three gate outcomes."""

    @property
    def kind(self) -> DecisionKind:
        raise NotImplementedError

    @property
    def accepted(self) -> bool:
        return self.kind == DecisionKind.ACCEPTED

    @property
    def message(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "accepted": self.accepted, "message": self.message}


@dataclass(frozen=True)
class Accepted(Decision):
    record: CooldownRecord

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.ACCEPTED

    @property
    def message(self) -> str:
        return "Attendance recorded."


@dataclass(frozen=True)
class RejectedOutsideZone(Decision):
    distance_km: float
    radius_km: Optional[float] = field(default=None, compare=False)
    zone_label: str = field(default="", compare=False)

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.REJECTED_OUTSIDE_ZONE

    @property
    def message(self) -> str:
        where = self.zone_label or "the attendance zone"
        msg = f"You are {_format_distance(self.distance_km)} from {where}"
        if self.radius_km is not None:
            msg += f" (allowed within {_format_distance(self.radius_km)})"
        return msg + "."

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["distance_km"] = self.distance_km
        out["radius_km"] = self.radius_km
        return out


@dataclass(frozen=True)
class RejectedCooldown(Decision):
    remaining_minutes: float
    window_minutes: Optional[float] = field(default=None, compare=False)

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind.REJECTED_COOLDOWN

    @property
    def remaining_whole_minutes(self) -> int:
        return max(1, math.ceil(self.remaining_minutes))

    @property
    def message(self) -> str:
        prefix = ""
        if self.window_minutes is not None:
            prefix = f"Submissions from the same device must be {self.window_minutes:g} minutes apart. "
        return f"{prefix}Please wait about {self.remaining_whole_minutes} more minute(s)."

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["remaining_minutes"] = self.remaining_whole_minutes
        return out


@dataclass(frozen=True)
class SubmissionRecord:
    """Accepted submission as handed to the store."""

    submission_id: int
    course_id: Optional[str]
    device_key: str
    submitted_at: float
    coordinate: Optional[Coordinate]
    values: Mapping[str, Any]
