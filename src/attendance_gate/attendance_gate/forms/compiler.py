from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, create_model

from ..common.datetime_utils import now_local
from ..core.enums import FieldType
from ..core.exceptions import DuplicateFieldKey, SubmissionInvalid
from .model import FieldDescriptor
from .rules import REQUIRED_MESSAGE, FieldRuleFactory


@dataclass(frozen=True)
class RuleSpec:
    """Structural description of one compiled field rule."""

    key: str
    label: str
    type: FieldType
    required: bool
    min_length: Optional[int] = None
    max_length: Optional[int] = None


@dataclass(frozen=True)
class ValidationSchema:
    """Runtime validator for one course form.

    Equality is structural (``rules`` only); ``model`` is the generated
    pydantic class and differs between compilations.
    """

    rules: tuple[RuleSpec, ...]
    model: type[BaseModel] = field(compare=False, repr=False)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(r.key for r in self.rules)

    @property
    def required_keys(self) -> tuple[str, ...]:
        return tuple(r.key for r in self.rules if r.required)

    def json_schema(self) -> dict[str, Any]:
        return self.model.model_json_schema(by_alias=True)

    def validate(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Validate submitted values, returning cleaned values keyed by field key.

        Keys that are not part of the form are ignored.
        """
        try:
            parsed = self.model.model_validate(dict(values))
        except pydantic.ValidationError as e:
            raise SubmissionInvalid(self._errors(e)) from None
        return parsed.model_dump(by_alias=True)

    def _errors(self, exc: pydantic.ValidationError) -> dict[str, str]:
        labels = {r.key: r.label for r in self.rules}
        errors: dict[str, str] = {}
        for err in exc.errors():
            key = str(err["loc"][0]) if err.get("loc") else "__root__"
            if key in errors:
                continue
            if err["type"] == "missing":
                reason = REQUIRED_MESSAGE
            elif err["type"] == "value_error":
                reason = str(err.get("ctx", {}).get("error") or err["msg"])
            else:
                reason = err["msg"]
            errors[key] = f"{labels.get(key, key)} {reason}"
        return errors


@dataclass(frozen=True)
class CompiledForm:
    schema: ValidationSchema
    defaults: dict[str, Any]
    fields: tuple[FieldDescriptor, ...]


class SchemaCompiler:
    """Turn a unified field set into a validation schema and default values.

    Pure: the only outside input is ``today``, which seeds the default of the
    canonical ``date`` field.
    """

    def __init__(self, *, rule_factory: FieldRuleFactory | None = None):
        self._rules = rule_factory or FieldRuleFactory()

    def compile(self, fields: Iterable[FieldDescriptor], *, today: Optional[date] = None) -> CompiledForm:
        today = today or now_local().date()
        live = [f for f in fields if f.enabled]
        live.sort(key=lambda f: (f.order is None, f.order if f.order is not None else 0))

        specs: list[RuleSpec] = []
        definitions: dict[str, Any] = {}
        defaults: dict[str, Any] = {}
        for i, f in enumerate(live):
            if f.key in defaults:
                raise DuplicateFieldKey(f.key)
            rule = self._rules.for_type(f.type)
            # Keys may not be valid identifiers; they travel as aliases.
            definitions[f"field_{i}"] = (rule.annotation(f), rule.field_info(f, alias=f.key))
            defaults[f.key] = rule.default(f, today=today)
            specs.append(
                RuleSpec(
                    key=f.key,
                    label=f.label,
                    type=f.type,
                    required=f.required,
                    min_length=f.min_length,
                    max_length=f.max_length,
                )
            )

        model = create_model(
            "AttendanceFormValues",
            __config__=ConfigDict(extra="ignore", populate_by_name=False),
            **definitions,
        )
        return CompiledForm(
            schema=ValidationSchema(rules=tuple(specs), model=model),
            defaults=defaults,
            fields=tuple(live),
        )
