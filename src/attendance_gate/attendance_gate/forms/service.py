from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from ..common.cache import TTLCache, cache_key
from ..common.validators import require_non_empty
from ..core.enums import FieldOrigin, Role
from ..core.exceptions import AuthorizationError
from .compiler import CompiledForm, SchemaCompiler
from .merger import FieldMerger
from .model import FieldDescriptor, FormConfig
from .repository import FormConfigRepository

logger = logging.getLogger(__name__)


class FormConfigService:
    """Per-course form configuration: load, mutate, merge, compile.

    Mutations require ``Role.ADMIN``; reads are open because the student
    form needs them.
    """

    def __init__(
        self,
        configs: FormConfigRepository,
        *,
        merger: FieldMerger | None = None,
        compiler: SchemaCompiler | None = None,
        cache: TTLCache | None = None,
    ):
        self._configs = configs
        self._merger = merger or FieldMerger()
        self._compiler = compiler or SchemaCompiler()
        self._cache = cache

    def get_config(self, course_id: str) -> FormConfig:
        course_id = require_non_empty(course_id, "course_id")
        key = cache_key("form-config", course_id)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        config = self._configs.get(course_id) or FormConfig.default()
        if self._cache is not None:
            self._cache.set(key, config)
        return config

    def save_config(self, *, current_role: Role, course_id: str, config: FormConfig) -> FormConfig:
        self._require_admin(current_role)
        course_id = require_non_empty(course_id, "course_id")
        self._merger.merge_config(config)
        self._configs.save(course_id, config)
        if self._cache is not None:
            self._cache.invalidate(cache_key("form-config", course_id))
        logger.info(
            "form config saved course=%s builtins=%d custom=%d",
            course_id,
            len(config.enabled_builtin_keys),
            len(config.custom_fields),
        )
        return config

    def add_custom_field(self, *, current_role: Role, course_id: str, field: Mapping[str, Any]) -> FormConfig:
        self._require_admin(current_role)
        data = dict(field)
        data["origin"] = FieldOrigin.CUSTOM.value
        data.pop("source_key", None)
        data["order"] = None
        descriptor = FieldDescriptor.from_dict(data)
        config = self._merger.add_custom(self.get_config(course_id), descriptor)
        return self.save_config(current_role=current_role, course_id=course_id, config=config)

    def edit_custom_field(
        self, *, current_role: Role, course_id: str, key: str, changes: Mapping[str, Any]
    ) -> FormConfig:
        self._require_admin(current_role)
        changes = dict(changes)
        if "options" in changes:
            changes["options"] = tuple(changes["options"] or ())
        config = self._merger.edit_custom(self.get_config(course_id), key, **changes)
        return self.save_config(current_role=current_role, course_id=course_id, config=config)

    def remove_custom_field(self, *, current_role: Role, course_id: str, key: str) -> FormConfig:
        self._require_admin(current_role)
        config = self._merger.remove_custom(self.get_config(course_id), key)
        return self.save_config(current_role=current_role, course_id=course_id, config=config)

    def toggle_field(self, *, current_role: Role, course_id: str, key: str, enabled: bool) -> FormConfig:
        self._require_admin(current_role)
        config = self._merger.toggle(self.get_config(course_id), key, enabled=enabled)
        return self.save_config(current_role=current_role, course_id=course_id, config=config)

    def reorder(self, *, current_role: Role, course_id: str, sequence: Iterable[str]) -> FormConfig:
        self._require_admin(current_role)
        config = self._merger.reorder_config(self.get_config(course_id), list(sequence))
        return self.save_config(current_role=current_role, course_id=course_id, config=config)

    def unified_fields(self, course_id: str) -> list[FieldDescriptor]:
        return self._merger.merge_config(self.get_config(course_id))

    def disabled_builtins(self, course_id: str) -> list[FieldDescriptor]:
        return self._merger.disabled_builtins(self.get_config(course_id))

    def compiled_form(self, course_id: str, *, today: Optional[date] = None) -> CompiledForm:
        return self._compiler.compile(self.unified_fields(course_id), today=today)

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can change form settings")
