from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used to guard configuration endpoints."""

    ADMIN = "admin"
    STUDENT = "student"


class FieldType(str, Enum):
    """Closed set of form field types.

    Adding a member requires a matching rule in ``forms.rules``.
    """

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"

    @property
    def has_options(self) -> bool:
        return self in (FieldType.SELECT, FieldType.RADIO)


class FieldOrigin(str, Enum):
    BUILTIN = "builtin"
    CUSTOM = "custom"


class DecisionKind(str, Enum):
    """Outcome of a submission attempt."""

    ACCEPTED = "ACCEPTED"
    REJECTED_OUTSIDE_ZONE = "REJECTED_OUTSIDE_ZONE"
    REJECTED_COOLDOWN = "REJECTED_COOLDOWN"
