from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import FieldOrigin
from ..core.exceptions import DuplicateFieldKey, UnknownKey, ValidationError
from .catalog import FieldCatalog
from .model import FieldDescriptor, FormConfig, coerce_field_type

_LOCKED_ATTRS = {"origin", "source_key", "order", "enabled"}


class FieldMerger:
    """Combine enabled built-ins and custom fields into one unified field set.

    Output ordering: enabled fields sorted by ``(order, insertion index)`` and
    renumbered ``0..n-1``; disabled custom fields follow, outside the live
    sequence. All operations return new values and never mutate inputs.
    """

    def merge(
        self,
        custom_fields: Iterable[FieldDescriptor],
        enabled_builtin_keys: Iterable[str],
        *,
        builtin_orders: Optional[Mapping[str, int]] = None,
    ) -> list[FieldDescriptor]:
        builtin_orders = builtin_orders or {}
        slots: list[tuple[int, int, FieldDescriptor]] = []
        seen: set[str] = set()

        keys = sorted(dict.fromkeys(enabled_builtin_keys), key=FieldCatalog.position)
        for key in keys:
            order = builtin_orders.get(key, FieldCatalog.position(key))
            slots.append((int(order), len(slots), FieldCatalog.instantiate(key)))
            seen.add(key)

        next_order = max((s[0] for s in slots), default=-1) + 1
        disabled: list[FieldDescriptor] = []
        for f in custom_fields:
            if f.origin != FieldOrigin.CUSTOM:
                raise ValidationError(f"Field {f.key!r} is not a custom field")
            if f.key in seen:
                raise DuplicateFieldKey(f.key)
            seen.add(f.key)

            if not f.enabled:
                disabled.append(f)
                continue
            order = next_order if f.order is None else int(f.order)
            next_order = max(next_order, order + 1)
            slots.append((order, len(slots), f))

        slots.sort(key=lambda s: (s[0], s[1]))
        live = [replace(f, order=i, enabled=True) for i, (_, _, f) in enumerate(slots)]
        tail = [replace(f, order=len(live) + i) for i, f in enumerate(disabled)]
        return live + tail

    def merge_config(self, config: FormConfig) -> list[FieldDescriptor]:
        return self.merge(
            config.custom_fields,
            config.enabled_builtin_keys,
            builtin_orders=config.builtin_orders,
        )

    def split(self, fields: Sequence[FieldDescriptor], *, previous: Optional[FormConfig] = None) -> FormConfig:
        """Inverse of :meth:`merge`.

        Explicit orders of disabled built-ins are carried over from
        ``previous`` so they survive a round trip.
        """
        orders: dict[str, int] = {}
        if previous is not None:
            orders.update(previous.builtin_orders)

        builtin_keys: list[str] = []
        custom: list[FieldDescriptor] = []
        for f in fields:
            if f.is_builtin:
                if f.enabled:
                    builtin_keys.append(f.source_key or f.key)
                    if f.order is not None:
                        orders[f.source_key or f.key] = f.order
            else:
                custom.append(f)

        builtin_keys.sort(key=FieldCatalog.position)
        return FormConfig(custom_fields=tuple(custom), enabled_builtin_keys=tuple(builtin_keys), builtin_orders=orders)

    def reorder(self, fields: Sequence[FieldDescriptor], sequence: Iterable[str]) -> list[FieldDescriptor]:
        """Re-assign ``order`` by appearance in ``sequence``.

        Enabled fields missing from ``sequence`` keep their relative order and
        go to the end; unknown keys in ``sequence`` are ignored.
        """
        ordered = sorted(fields, key=lambda f: (not f.enabled, f.order if f.order is not None else 0))
        live = [f for f in ordered if f.enabled]
        disabled = [f for f in ordered if not f.enabled]
        live_by_key = {f.key: f for f in live}

        requested = [k for k in dict.fromkeys(sequence) if k in live_by_key]
        requested_set = set(requested)
        rest = [f for f in live if f.key not in requested_set]

        out = [replace(live_by_key[k], order=i) for i, k in enumerate(requested)]
        out.extend(replace(f, order=len(out) + i) for i, f in enumerate(rest))
        out.extend(replace(f, order=len(out) + i) for i, f in enumerate(disabled))
        return out

    def reorder_config(self, config: FormConfig, sequence: Iterable[str]) -> FormConfig:
        return self.split(self.reorder(self.merge_config(config), sequence), previous=config)

    def disabled_builtins(self, config: FormConfig) -> list[FieldDescriptor]:
        enabled = set(config.enabled_builtin_keys)
        return [
            FieldCatalog.instantiate(k, order=config.builtin_orders.get(k), enabled=False)
            for k in FieldCatalog.keys()
            if k not in enabled
        ]

    def disable(self, config: FormConfig, key: str) -> FormConfig:
        if key in config.enabled_builtin_keys:
            return FormConfig(
                custom_fields=config.custom_fields,
                enabled_builtin_keys=tuple(k for k in config.enabled_builtin_keys if k != key),
                builtin_orders=config.builtin_orders,
            )
        # Custom fields have no retained disabled state.
        return self.remove_custom(config, key)

    def enable(self, config: FormConfig, key: str) -> FormConfig:
        if not FieldCatalog.contains(key):
            raise UnknownKey(key)
        if key in config.enabled_builtin_keys:
            return config
        if any(f.key == key for f in config.custom_fields):
            raise DuplicateFieldKey(key)
        return FormConfig(
            custom_fields=config.custom_fields,
            enabled_builtin_keys=config.enabled_builtin_keys + (key,),
            builtin_orders=config.builtin_orders,
        )

    def toggle(self, config: FormConfig, key: str, *, enabled: bool) -> FormConfig:
        return self.enable(config, key) if enabled else self.disable(config, key)

    def add_custom(self, config: FormConfig, field: FieldDescriptor) -> FormConfig:
        if field.origin != FieldOrigin.CUSTOM:
            raise ValidationError(f"Field {field.key!r} is not a custom field")
        updated = FormConfig(
            custom_fields=config.custom_fields + (field,),
            enabled_builtin_keys=config.enabled_builtin_keys,
            builtin_orders=config.builtin_orders,
        )
        self.merge_config(updated)
        return updated

    def edit_custom(self, config: FormConfig, key: str, **changes: Any) -> FormConfig:
        locked = _LOCKED_ATTRS & set(changes)
        if locked:
            raise ValidationError(f"Cannot edit {', '.join(sorted(locked))} of field {key!r}")

        index = self._custom_index(config, key)
        current = config.custom_fields[index]
        if "type" in changes and "options" not in changes:
            if not coerce_field_type(changes["type"]).has_options:
                changes["options"] = ()
        try:
            edited = replace(current, **changes)
        except TypeError as e:
            raise ValidationError(str(e)) from None

        fields = list(config.custom_fields)
        fields[index] = edited
        updated = FormConfig(
            custom_fields=tuple(fields),
            enabled_builtin_keys=config.enabled_builtin_keys,
            builtin_orders=config.builtin_orders,
        )
        self.merge_config(updated)
        return updated

    def remove_custom(self, config: FormConfig, key: str) -> FormConfig:
        index = self._custom_index(config, key)
        fields = list(config.custom_fields)
        del fields[index]
        return FormConfig(
            custom_fields=tuple(fields),
            enabled_builtin_keys=config.enabled_builtin_keys,
            builtin_orders=config.builtin_orders,
        )

    @staticmethod
    def _custom_index(config: FormConfig, key: str) -> int:
        for i, f in enumerate(config.custom_fields):
            if f.key == key:
                return i
        raise UnknownKey(key)
