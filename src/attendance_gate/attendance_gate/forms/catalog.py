from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import FieldOrigin, FieldType
from ..core.exceptions import UnknownKey
from .model import FieldDescriptor


@dataclass(frozen=True)
class BuiltinField:
    key: str
    label: str
    type: FieldType
    required: bool = True


_BUILTINS: tuple[BuiltinField, ...] = (
    BuiltinField("date", "Date", FieldType.DATE),
    BuiltinField("class_name", "Class name", FieldType.SELECT, required=False),
    BuiltinField("student_id", "Student ID", FieldType.TEXT),
    BuiltinField("grade", "Grade", FieldType.SELECT),
    BuiltinField("name", "Name", FieldType.TEXT),
    BuiltinField("department", "Department / course", FieldType.TEXT),
    BuiltinField("feedback", "Lecture report", FieldType.TEXTAREA),
)

_BY_KEY = {b.key: (i, b) for i, b in enumerate(_BUILTINS)}


class FieldCatalog:
    """Fixed set of built-in fields every course form may enable."""

    @staticmethod
    def keys() -> tuple[str, ...]:
        return tuple(b.key for b in _BUILTINS)

    @staticmethod
    def contains(key: str) -> bool:
        return key in _BY_KEY

    @staticmethod
    def get(key: str) -> BuiltinField:
        try:
            return _BY_KEY[key][1]
        except KeyError:
            raise UnknownKey(key) from None

    @staticmethod
    def position(key: str) -> int:
        try:
            return _BY_KEY[key][0]
        except KeyError:
            raise UnknownKey(key) from None

    @classmethod
    def instantiate(cls, key: str, *, order: int | None = None, enabled: bool = True) -> FieldDescriptor:
        b = cls.get(key)
        return FieldDescriptor(
            key=b.key,
            label=b.label,
            type=b.type,
            required=b.required,
            order=order,
            origin=FieldOrigin.BUILTIN,
            source_key=b.key,
            enabled=enabled,
        )
