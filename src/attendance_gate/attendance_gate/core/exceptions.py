from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class SubmissionInvalid(ValidationError):
    """Raised when submitted form values fail the compiled schema."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()) or "invalid submission")


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class ConfigurationError(DomainError):
    """Form configuration has an invalid shape. Never auto-corrected."""


class UnknownKey(ConfigurationError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown field key: {key!r}")


class DuplicateFieldKey(ConfigurationError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate field key: {key!r}")


class UnsupportedFieldType(ConfigurationError):
    def __init__(self, field_type: object):
        self.field_type = field_type
        super().__init__(f"Unsupported field type: {field_type!r}")


class GeofenceError(DomainError):
    """Geofence inputs are unusable."""


class InvalidCoordinate(GeofenceError):
    pass


class InvalidZone(GeofenceError):
    pass


class NoZoneConfigured(GeofenceError):
    def __init__(self, course_id: str | None = None):
        self.course_id = course_id
        where = f" for course {course_id!r}" if course_id else ""
        super().__init__(f"No location zone configured{where}")
