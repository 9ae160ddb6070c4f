"""Spreadsheet-style rows for accepted submissions.

Layout: ``ID``, ``CreatedAt``, one column per enabled field in display
order, then ``Latitude`` and ``Longitude``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..core.enums import FieldType
from ..forms.model import FieldDescriptor
from ..geofence.model import Coordinate


def _live(fields: Sequence[FieldDescriptor]) -> list[FieldDescriptor]:
    live = [f for f in fields if f.enabled]
    live.sort(key=lambda f: (f.order is None, f.order if f.order is not None else 0))
    return live


def build_headers(fields: Sequence[FieldDescriptor]) -> list[str]:
    return ["ID", "CreatedAt", *(f.label for f in _live(fields)), "Latitude", "Longitude"]


def _cell(field: FieldDescriptor, value: Any) -> Any:
    if value is None or value == "":
        return ""
    if field.type == FieldType.NUMBER and isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    if field.type == FieldType.DATE and isinstance(value, str):
        try:
            return parse_iso_date(value).isoformat()
        except ValueError:
            return value
    return value


def build_row(
    values: Mapping[str, Any],
    fields: Sequence[FieldDescriptor],
    *,
    record_id: str,
    created_at: str,
    coordinate: Optional[Coordinate] = None,
) -> list[Any]:
    row: list[Any] = [record_id, created_at]
    row.extend(_cell(f, values.get(f.key)) for f in _live(fields))
    row.append(coordinate.latitude if coordinate else "")
    row.append(coordinate.longitude if coordinate else "")
    return row
