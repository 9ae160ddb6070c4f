from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import date
from typing import Annotated, Any, Callable, Optional

from pydantic import AfterValidator, BeforeValidator, Field, StrictBool
from pydantic.fields import FieldInfo

from ..common.datetime_utils import parse_iso_date
from ..core.enums import FieldType
from ..core.exceptions import UnsupportedFieldType
from .model import FieldDescriptor

REQUIRED_MESSAGE = "is required"


def _text_check(*, required: bool, min_length: Optional[int], max_length: Optional[int]) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not value.strip():
            if required:
                raise ValueError(REQUIRED_MESSAGE)
            return value
        if min_length is not None and len(value) < min_length:
            raise ValueError(f"must be at least {min_length} characters")
        if max_length is not None and len(value) > max_length:
            raise ValueError(f"must be at most {max_length} characters")
        return value

    return check


def _number_parse(*, required: bool) -> Callable[[Any], Optional[float]]:
    def parse(value: Any) -> Optional[float]:
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValueError(REQUIRED_MESSAGE)
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError("must be a number")
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except ValueError:
            raise ValueError("must be a number") from None
        if not math.isfinite(number):
            raise ValueError("must be a finite number")
        return number

    return parse


def _date_check(value: str) -> str:
    if not value.strip():
        raise ValueError(REQUIRED_MESSAGE)
    try:
        parse_iso_date(value)
    except ValueError:
        raise ValueError("must be a valid date") from None
    # Kept as given; no timezone normalization happens here.
    return value


def _must_be_checked(value: bool) -> bool:
    if value is not True:
        raise ValueError("must be checked")
    return value


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class FieldRule(ABC):
    """Strategy Pattern: how one field type validates and defaults."""

    @abstractmethod
    def annotation(self, field: FieldDescriptor) -> Any:
        raise NotImplementedError

    @abstractmethod
    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        raise NotImplementedError

    def missing_value(self, field: FieldDescriptor) -> Any:
        return None

    def field_info(self, field: FieldDescriptor, *, alias: str) -> FieldInfo:
        if field.required:
            return Field(..., alias=alias, title=field.label)
        return Field(default=self.missing_value(field), alias=alias, title=field.label)


class TextRule(FieldRule):
    """text / textarea."""

    def annotation(self, field: FieldDescriptor) -> Any:
        check = AfterValidator(
            _text_check(required=field.required, min_length=field.min_length, max_length=field.max_length)
        )
        if field.required:
            return Annotated[str, check]
        return Optional[Annotated[str, check]]

    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        return _as_text(field.default_value)


class ChoiceRule(FieldRule):
    """select / radio. Membership in ``options`` is not enforced."""

    def annotation(self, field: FieldDescriptor) -> Any:
        if field.required:
            return Annotated[str, AfterValidator(_text_check(required=True, min_length=None, max_length=None))]
        return Optional[str]

    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        return _as_text(field.default_value)


class NumberRule(FieldRule):
    def annotation(self, field: FieldDescriptor) -> Any:
        parse = BeforeValidator(_number_parse(required=field.required))
        if field.required:
            return Annotated[float, parse]
        return Annotated[Optional[float], parse]

    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        # Unparsed placeholder, the form input holds a string.
        return _as_text(field.default_value)


class DateRule(FieldRule):
    def annotation(self, field: FieldDescriptor) -> Any:
        if field.required:
            return Annotated[str, AfterValidator(_date_check)]
        return Optional[str]

    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        if field.is_builtin and field.source_key == "date":
            return today.isoformat()
        return _as_text(field.default_value)


class CheckboxRule(FieldRule):
    """A required checkbox models "must acknowledge"."""

    def annotation(self, field: FieldDescriptor) -> Any:
        if field.required:
            return Annotated[StrictBool, AfterValidator(_must_be_checked)]
        return Optional[StrictBool]

    def missing_value(self, field: FieldDescriptor) -> Any:
        return False

    def default(self, field: FieldDescriptor, *, today: date) -> Any:
        return field.default_value is True or field.default_value == "true"


class FieldRuleFactory:
    """Factory Pattern: pick the rule for a field type."""

    _RULES: dict[FieldType, FieldRule] = {
        FieldType.TEXT: TextRule(),
        FieldType.TEXTAREA: TextRule(),
        FieldType.NUMBER: NumberRule(),
        FieldType.DATE: DateRule(),
        FieldType.SELECT: ChoiceRule(),
        FieldType.RADIO: ChoiceRule(),
        FieldType.CHECKBOX: CheckboxRule(),
    }

    def for_type(self, field_type: object) -> FieldRule:
        rule = self._RULES.get(field_type) if isinstance(field_type, FieldType) else None
        if rule is None:
            raise UnsupportedFieldType(field_type)
        return rule


_uncovered = set(FieldType) - set(FieldRuleFactory._RULES)
if _uncovered:
    raise RuntimeError(f"No field rule for: {sorted(t.value for t in _uncovered)}")
