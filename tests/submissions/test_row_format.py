from __future__ import annotations

from src.attendance_gate.attendance_gate.core.enums import FieldType
from src.attendance_gate.attendance_gate.forms.catalog import FieldCatalog
from src.attendance_gate.attendance_gate.forms.model import FieldDescriptor
from src.attendance_gate.attendance_gate.geofence.model import Coordinate
from src.attendance_gate.attendance_gate.submissions.row_format import build_headers, build_row

FIELDS = [
    FieldDescriptor(key="seat", label="Seat", type=FieldType.NUMBER, order=2),
    FieldCatalog.instantiate("date", order=0),
    FieldCatalog.instantiate("name", order=1),
    FieldDescriptor(key="old", label="Old", type=FieldType.TEXT, order=3, enabled=False),
]


def test_headers_follow_field_order():
    assert build_headers(FIELDS) == ["ID", "CreatedAt", "Date", "Name", "Seat", "Latitude", "Longitude"]


def test_row_normalizes_numbers_and_dates():
    row = build_row(
        {"date": "2025-04-10T08:00:00", "name": "Aiko", "seat": "7", "old": "x"},
        FIELDS,
        record_id="42",
        created_at="2025-04-10T08:01:00",
        coordinate=Coordinate(33.1, 131.6),
    )

    assert row == ["42", "2025-04-10T08:01:00", "2025-04-10", "Aiko", 7.0, 33.1, 131.6]


def test_row_without_location_or_values():
    row = build_row({"seat": None}, FIELDS, record_id="1", created_at="t")
    assert row == ["1", "t", "", "", "", "", ""]


def test_unparseable_cells_are_kept_as_given():
    row = build_row({"date": "someday", "seat": "n/a"}, FIELDS, record_id="1", created_at="t")
    assert row[2] == "someday"
    assert row[4] == "n/a"
