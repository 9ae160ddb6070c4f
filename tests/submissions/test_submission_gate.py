from __future__ import annotations

import pytest

from src.attendance_gate.attendance_gate.core.enums import DecisionKind
from src.attendance_gate.attendance_gate.core.exceptions import InvalidCoordinate, NoZoneConfigured, ValidationError
from src.attendance_gate.attendance_gate.geofence.model import Coordinate, LocationConfig
from src.attendance_gate.attendance_gate.submissions.gate import SubmissionGate
from src.attendance_gate.attendance_gate.submissions.model import (
    Accepted,
    CooldownRecord,
    RejectedCooldown,
    RejectedOutsideZone,
    SubmissionAttempt,
)

CAMPUS = LocationConfig(33.1751332, 131.6138803, 0.5, "Main campus")
INSIDE = Coordinate(33.1751332, 131.6138803)
FAR_AWAY = Coordinate(33.2651332, 131.6138803)


def _attempt(t: float, *, coordinate=INSIDE, device="dev-1", course="c-1") -> SubmissionAttempt:
    return SubmissionAttempt(device_key=device, course_id=course, timestamp=t, coordinate=coordinate)


def test_cooldown_sequence_of_three_presses():
    gate = SubmissionGate()

    first = gate.decide(_attempt(0), CAMPUS, 15)
    assert isinstance(first, Accepted)
    assert first.record == CooldownRecord("dev-1", "global", 0.0)

    second = gate.decide(_attempt(600), CAMPUS, 15, first.record)
    assert second == RejectedCooldown(remaining_minutes=5.0)
    assert second.kind == DecisionKind.REJECTED_COOLDOWN

    third = gate.decide(_attempt(960), CAMPUS, 15, first.record)
    assert isinstance(third, Accepted)
    assert third.record.last_accepted_at == 960.0


def test_window_boundary_is_exclusive():
    gate = SubmissionGate()
    prior = CooldownRecord("dev-1", "global", 0.0)

    assert isinstance(gate.decide(_attempt(900), CAMPUS, 15, prior), Accepted)
    assert isinstance(gate.decide(_attempt(899.999), CAMPUS, 15, prior), RejectedCooldown)


def test_zero_window_never_rejects():
    prior = CooldownRecord("dev-1", "global", 100.0)
    assert isinstance(SubmissionGate().decide(_attempt(100), CAMPUS, 0, prior), Accepted)


def test_outside_zone_wins_over_cooldown():
    prior = CooldownRecord("dev-1", "global", 0.0)

    decision = SubmissionGate().decide(_attempt(60, coordinate=FAR_AWAY), CAMPUS, 15, prior)

    assert isinstance(decision, RejectedOutsideZone)
    assert decision.distance_km == pytest.approx(10.0, abs=0.5)
    assert decision.radius_km == 0.5


def test_outside_zone_message():
    decision = SubmissionGate().decide(_attempt(0, coordinate=FAR_AWAY), CAMPUS, 15)
    assert decision.message.startswith("You are 10.0 km from Main campus")
    assert "500 m" in decision.message
    assert decision.to_dict()["kind"] == "REJECTED_OUTSIDE_ZONE"


def test_cooldown_message_rounds_up():
    decision = RejectedCooldown(remaining_minutes=0.2, window_minutes=15)

    assert decision.remaining_whole_minutes == 1
    assert "15 minutes apart" in decision.message
    assert decision.to_dict()["remaining_minutes"] == 1
    assert decision.accepted is False


def test_clock_skew_counts_as_zero_elapsed():
    prior = CooldownRecord("dev-1", "global", 1_000.0)

    decision = SubmissionGate().decide(_attempt(500), CAMPUS, 15, prior)

    assert decision == RejectedCooldown(remaining_minutes=15.0)


def test_missing_zone_is_an_error_not_a_pass():
    with pytest.raises(NoZoneConfigured):
        SubmissionGate().decide(_attempt(0), None, 15)


def test_bypass_skips_geofence_only():
    gate = SubmissionGate()
    first = gate.decide(_attempt(0, coordinate=None), None, 15, bypass_geofence=True)
    assert isinstance(first, Accepted)

    second = gate.decide(_attempt(60, coordinate=None), None, 15, first.record, bypass_geofence=True)
    assert isinstance(second, RejectedCooldown)


def test_missing_coordinate():
    with pytest.raises(InvalidCoordinate):
        SubmissionGate().decide(_attempt(0, coordinate=None), CAMPUS, 15)


@pytest.mark.parametrize(
    "attempt, window",
    [
        (SubmissionAttempt(device_key="", course_id="c-1", timestamp=0, coordinate=INSIDE), 15),
        (SubmissionAttempt(device_key="d", course_id="c-1", timestamp=float("nan"), coordinate=INSIDE), 15),
        (SubmissionAttempt(device_key="d", course_id="c-1", timestamp=0, coordinate=INSIDE), -1),
        (SubmissionAttempt(device_key="d", course_id="c-1", timestamp=0, coordinate=INSIDE), float("inf")),
    ],
)
def test_invalid_attempt_or_window(attempt, window):
    with pytest.raises(ValidationError):
        SubmissionGate().decide(attempt, CAMPUS, window)


def test_record_for_another_device_is_rejected():
    prior = CooldownRecord("dev-2", "global", 0.0)
    with pytest.raises(ValidationError):
        SubmissionGate().decide(_attempt(60), CAMPUS, 15, prior)


def test_per_course_scope():
    gate = SubmissionGate(per_course_cooldown=True)

    decision = gate.decide(_attempt(0, course="c-1"), CAMPUS, 15)
    assert decision.record.scope == "c-1"

    assert isinstance(gate.decide(_attempt(60, course="c-2"), CAMPUS, 15), Accepted)
    with pytest.raises(ValidationError):
        gate.decide(_attempt(60, course="c-2"), CAMPUS, 15, decision.record)


def test_per_course_without_course_falls_back_to_global():
    gate = SubmissionGate(per_course_cooldown=True)
    assert gate.scope_for(_attempt(0, course=None)) == "global"


def test_decide_is_deterministic():
    gate = SubmissionGate()
    prior = CooldownRecord("dev-1", "global", 0.0)
    assert gate.decide(_attempt(300), CAMPUS, 15, prior) == gate.decide(_attempt(300), CAMPUS, 15, prior)
