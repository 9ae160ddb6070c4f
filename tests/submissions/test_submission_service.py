from __future__ import annotations

from typing import Optional

import pytest

from src.attendance_gate.attendance_gate.container import ServiceSettings, build_services
from src.attendance_gate.attendance_gate.core.enums import DecisionKind, Role
from src.attendance_gate.attendance_gate.core.exceptions import (
    AuthorizationError,
    NoZoneConfigured,
    SubmissionInvalid,
)
from src.attendance_gate.attendance_gate.geofence.model import Coordinate, LocationConfig
from src.attendance_gate.attendance_gate.forms.model import FormConfig
from src.attendance_gate.attendance_gate.submissions.model import CooldownRecord, SubmissionRecord

CAMPUS = LocationConfig(33.1751332, 131.6138803, 0.5, "Main campus")
INSIDE = Coordinate(33.1751332, 131.6138803)
FAR_AWAY = Coordinate(33.2651332, 131.6138803)
VALUES = {"date": "2025-04-10", "name": "Aiko", "seat": "12"}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class InMemoryFormConfigRepo:
    def __init__(self, configs: Optional[dict] = None):
        self.configs = dict(configs or {})

    def get(self, course_id):
        return self.configs.get(course_id)

    def save(self, course_id, config):
        self.configs[course_id] = config


class InMemoryLocationRepo:
    def __init__(self, global_zone=None):
        self.global_zone = global_zone
        self.courses = {}

    def get_global(self):
        return self.global_zone

    def save_global(self, config):
        self.global_zone = config

    def get_for_course(self, course_id):
        return self.courses.get(course_id)

    def save_for_course(self, course_id, config):
        self.courses[course_id] = config

    def delete_for_course(self, course_id):
        return self.courses.pop(course_id, None) is not None


class InMemoryCooldownRepo:
    def __init__(self):
        self.records: dict[tuple[str, str], CooldownRecord] = {}

    def get(self, device_key, scope):
        return self.records.get((device_key, scope))

    def put(self, record):
        self.records[(record.device_key, record.scope)] = record


class InMemorySubmissionRepo:
    def __init__(self):
        self.rows: list[SubmissionRecord] = []

    def add(self, *, course_id, device_key, submitted_at, coordinate, values):
        record = SubmissionRecord(len(self.rows) + 1, course_id, device_key, submitted_at, coordinate, dict(values))
        self.rows.append(record)
        return record.submission_id

    def list_for_course(self, course_id, *, limit=200):
        return [r for r in reversed(self.rows) if r.course_id == course_id][:limit]


def _form() -> FormConfig:
    return FormConfig.from_dict(
        {
            "custom_fields": [{"key": "seat", "label": "Seat", "type": "number"}],
            "enabled_builtin_keys": ["date", "name"],
        }
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repos():
    return {
        "form_configs": InMemoryFormConfigRepo({"c-1": _form(), "c-2": _form(), "default": _form()}),
        "locations": InMemoryLocationRepo(CAMPUS),
        "cooldowns": InMemoryCooldownRepo(),
        "submissions": InMemorySubmissionRepo(),
    }


def _submissions(repos, clock, **settings):
    return build_services(**repos, settings=ServiceSettings(**settings), clock=clock).submission_service


def test_accepted_submission_is_stored(repos, clock):
    svc = _submissions(repos, clock)

    result = svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert result.decision.kind == DecisionKind.ACCEPTED
    assert result.submission_id == 1
    assert result.values == {"date": "2025-04-10", "name": "Aiko", "seat": 12.0}
    assert repos["cooldowns"].records[("dev-1", "global")].last_accepted_at == clock.now
    assert repos["submissions"].rows[0].values["seat"] == 12.0


def test_second_press_within_window_is_rejected(repos, clock):
    svc = _submissions(repos, clock)
    svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    clock.now += 600
    result = svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert result.decision.kind == DecisionKind.REJECTED_COOLDOWN
    assert result.decision.remaining_minutes == pytest.approx(5.0)
    assert result.submission_id is None
    assert len(repos["submissions"].rows) == 1

    clock.now += 360
    assert svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE).decision.accepted


def test_global_scope_spans_courses(repos, clock):
    svc = _submissions(repos, clock)
    svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    result = svc.submit(course_id="c-2", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert result.decision.kind == DecisionKind.REJECTED_COOLDOWN


def test_per_course_scope_keeps_courses_apart(repos, clock):
    svc = _submissions(repos, clock, per_course_cooldown=True)
    svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    result = svc.submit(course_id="c-2", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert result.decision.accepted
    assert set(repos["cooldowns"].records) == {("dev-1", "c-1"), ("dev-1", "c-2")}


def test_other_devices_are_independent(repos, clock):
    svc = _submissions(repos, clock)
    svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert svc.submit(course_id="c-1", device_key="dev-2", values=VALUES, coordinate=INSIDE).decision.accepted


def test_outside_zone_does_not_start_cooldown(repos, clock):
    svc = _submissions(repos, clock)

    rejected = svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=FAR_AWAY)
    assert rejected.decision.kind == DecisionKind.REJECTED_OUTSIDE_ZONE
    assert repos["cooldowns"].records == {}

    clock.now += 30
    assert svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE).decision.accepted


def test_course_override_zone_is_used(repos, clock):
    repos["locations"].courses["c-1"] = LocationConfig(FAR_AWAY.latitude, FAR_AWAY.longitude, 0.3, "Field site")
    svc = _submissions(repos, clock)

    assert svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=FAR_AWAY).decision.accepted
    assert not svc.submit(course_id="c-2", device_key="dev-2", values=VALUES, coordinate=FAR_AWAY).decision.accepted


def test_invalid_values_store_nothing(repos, clock):
    svc = _submissions(repos, clock)

    with pytest.raises(SubmissionInvalid) as exc:
        svc.submit(course_id="c-1", device_key="dev-1", values={"date": "2025-04-10"}, coordinate=INSIDE)

    assert "name" in exc.value.errors
    assert repos["cooldowns"].records == {}
    assert repos["submissions"].rows == []


def test_no_zone_configured(repos, clock):
    repos["locations"].global_zone = None
    svc = _submissions(repos, clock)

    with pytest.raises(NoZoneConfigured):
        svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)


def test_bypass_accepts_without_location(repos, clock):
    repos["locations"].global_zone = None
    svc = _submissions(repos, clock, bypass_geofence=True)

    result = svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=None)

    assert result.decision.accepted


def test_courseless_submission_uses_default_form(repos, clock):
    svc = _submissions(repos, clock)

    result = svc.submit(course_id=None, device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert result.decision.accepted
    assert repos["submissions"].rows[0].course_id is None


def test_export_rows(repos, clock):
    svc = _submissions(repos, clock)
    svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    table = svc.export_rows(current_role=Role.ADMIN, course_id="c-1")

    assert table["headers"] == ["ID", "CreatedAt", "Date", "Name", "Seat", "Latitude", "Longitude"]
    row = table["rows"][0]
    assert row[0] == "1"
    assert row[2:] == ["2025-04-10", "Aiko", 12.0, INSIDE.latitude, INSIDE.longitude]


def test_export_rows_requires_admin(repos, clock):
    with pytest.raises(AuthorizationError):
        _submissions(repos, clock).export_rows(current_role=Role.STUDENT, course_id="c-1")


class FailingOnceSubmissionRepo(InMemorySubmissionRepo):
    def __init__(self):
        super().__init__()
        self.failed = False

    def add(self, **kw):
        if not self.failed:
            self.failed = True
            raise RuntimeError("store unavailable")
        return super().add(**kw)


def test_failed_store_does_not_start_cooldown(repos, clock):
    repos["submissions"] = FailingOnceSubmissionRepo()
    svc = _submissions(repos, clock)

    with pytest.raises(RuntimeError):
        svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)
    assert repos["cooldowns"].records == {}

    clock.now += 60
    retry = svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert retry.decision.accepted
    assert len(repos["submissions"].rows) == 1


def test_device_locks_are_released(repos, clock):
    svc = _submissions(repos, clock)

    for i in range(50):
        svc.submit(course_id="c-1", device_key=f"dev-{i}", values=VALUES, coordinate=INSIDE)
    svc.submit(course_id="c-1", device_key="dev-0", values=VALUES, coordinate=INSIDE)
    svc.submit(course_id="c-1", device_key="dev-x", values=VALUES, coordinate=FAR_AWAY)

    assert len(svc._locks) == 0


def test_device_lock_released_after_store_error(repos, clock):
    repos["submissions"] = FailingOnceSubmissionRepo()
    svc = _submissions(repos, clock)

    with pytest.raises(RuntimeError):
        svc.submit(course_id="c-1", device_key="dev-1", values=VALUES, coordinate=INSIDE)

    assert len(svc._locks) == 0
