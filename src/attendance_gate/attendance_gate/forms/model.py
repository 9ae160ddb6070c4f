from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..core.enums import FieldOrigin, FieldType
from ..core.exceptions import UnsupportedFieldType, ValidationError


def coerce_field_type(value: Any) -> FieldType:
    if isinstance(value, FieldType):
        return value
    try:
        return FieldType(str(value))
    except ValueError:
        raise UnsupportedFieldType(value) from None


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off", ""}


def _payload_int(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} must be an integer, got {value!r}") from None


def _payload_bool(value: Any, what: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
        return value.strip().lower() in _TRUE
    raise ValidationError(f"{what} must be true or false, got {value!r}")


@dataclass(frozen=True)
class FieldDescriptor:
    """One form field, built-in or administrator defined.

    ``order`` is ``None`` until a merge or reorder assigns a position.
    """

    key: str
    label: str
    type: FieldType
    required: bool = False
    placeholder: Optional[str] = None
    description: Optional[str] = None
    options: tuple[str, ...] = ()
    order: Optional[int] = None
    origin: FieldOrigin = FieldOrigin.CUSTOM
    source_key: Optional[str] = None
    enabled: bool = True
    default_value: Any = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def __post_init__(self):
        if not self.key or not str(self.key).strip():
            raise ValidationError("Field key must not be empty")
        object.__setattr__(self, "type", coerce_field_type(self.type))
        try:
            object.__setattr__(self, "origin", FieldOrigin(self.origin))
        except ValueError:
            raise ValidationError(f"Field {self.key!r}: unknown origin {self.origin!r}") from None
        object.__setattr__(self, "options", tuple(str(o) for o in (self.options or ())))
        # PATCH payloads reach here through dataclasses.replace, not from_dict.
        object.__setattr__(self, "required", _payload_bool(self.required, f"required of {self.key!r}"))
        object.__setattr__(self, "enabled", _payload_bool(self.enabled, f"enabled of {self.key!r}"))
        object.__setattr__(self, "order", _payload_int(self.order, f"order of {self.key!r}"))
        object.__setattr__(self, "min_length", _payload_int(self.min_length, "min_length"))
        object.__setattr__(self, "max_length", _payload_int(self.max_length, "max_length"))

        if self.options and not self.type.has_options:
            raise ValidationError(f"Field {self.key!r}: options are only allowed on select/radio fields")
        if self.origin == FieldOrigin.BUILTIN and not self.source_key:
            raise ValidationError(f"Built-in field {self.key!r} needs a source_key")
        if self.origin == FieldOrigin.CUSTOM and self.source_key:
            raise ValidationError(f"Custom field {self.key!r} cannot carry a source_key")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValidationError(f"Field {self.key!r}: min_length exceeds max_length")

    @property
    def is_builtin(self) -> bool:
        return self.origin == FieldOrigin.BUILTIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
            "placeholder": self.placeholder,
            "description": self.description,
            "options": list(self.options),
            "order": self.order,
            "origin": self.origin.value,
            "source_key": self.source_key,
            "enabled": self.enabled,
            "default_value": self.default_value,
            "min_length": self.min_length,
            "max_length": self.max_length,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDescriptor":
        # "name" is accepted for field lists saved by the old admin screen.
        key = data.get("key") or data.get("name")
        validation = data.get("validation") or {}
        return cls(
            key=str(key or ""),
            label=str(data.get("label") or key or ""),
            type=data.get("type", FieldType.TEXT.value),
            required=_payload_bool(data.get("required", False), f"required of {key!r}"),
            placeholder=data.get("placeholder"),
            description=data.get("description"),
            options=tuple(data.get("options") or ()),
            order=_payload_int(data.get("order"), f"order of {key!r}"),
            origin=data.get("origin", FieldOrigin.CUSTOM.value),
            source_key=data.get("source_key"),
            enabled=_payload_bool(data.get("enabled", True), f"enabled of {key!r}"),
            default_value=data.get("default_value", data.get("defaultValue")),
            min_length=_payload_int(data.get("min_length", validation.get("minLength")), "min_length"),
            max_length=_payload_int(data.get("max_length", validation.get("maxLength")), "max_length"),
        )


@dataclass(frozen=True)
class FormConfig:
    """Per-course form configuration as persisted by the config store.

    ``builtin_orders`` holds explicit positions assigned by a reorder; it is
    kept for disabled built-ins too so re-enabling restores their place.
    """

    custom_fields: tuple[FieldDescriptor, ...] = ()
    enabled_builtin_keys: tuple[str, ...] = ()
    builtin_orders: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "custom_fields", tuple(self.custom_fields))
        object.__setattr__(self, "enabled_builtin_keys", tuple(dict.fromkeys(self.enabled_builtin_keys)))
        object.__setattr__(self, "builtin_orders", dict(self.builtin_orders))
        for f in self.custom_fields:
            if f.origin != FieldOrigin.CUSTOM:
                raise ValidationError(f"Field {f.key!r} in custom_fields must have origin=custom")

    @classmethod
    def default(cls) -> "FormConfig":
        from .catalog import FieldCatalog

        return cls(custom_fields=(), enabled_builtin_keys=FieldCatalog.keys())

    def to_dict(self) -> dict[str, Any]:
        return {
            "custom_fields": [f.to_dict() for f in self.custom_fields],
            "enabled_builtin_keys": list(self.enabled_builtin_keys),
            "builtin_orders": dict(self.builtin_orders),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormConfig":
        custom = data.get("custom_fields", data.get("customFields")) or []
        enabled = data.get("enabled_builtin_keys", data.get("enabledDefaultFields"))
        if enabled is None:
            enabled = cls.default().enabled_builtin_keys
        return cls(
            custom_fields=tuple(FieldDescriptor.from_dict(f) for f in custom),
            enabled_builtin_keys=tuple(str(k) for k in enabled),
            builtin_orders={
                str(k): _payload_int(v, f"order of {k!r}") for k, v in (data.get("builtin_orders") or {}).items()
            },
        )
