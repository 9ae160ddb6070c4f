from __future__ import annotations

import pytest

from src.attendance_gate.attendance_gate.core.enums import FieldOrigin, FieldType
from src.attendance_gate.attendance_gate.core.exceptions import DuplicateFieldKey, UnknownKey, ValidationError
from src.attendance_gate.attendance_gate.forms.catalog import FieldCatalog
from src.attendance_gate.attendance_gate.forms.merger import FieldMerger
from src.attendance_gate.attendance_gate.forms.model import FieldDescriptor, FormConfig


def _custom(key: str, **kw) -> FieldDescriptor:
    kw.setdefault("type", FieldType.TEXT)
    return FieldDescriptor(key=key, label=key.title(), **kw)


def test_catalog_lists_builtins_in_fixed_order():
    assert FieldCatalog.keys() == ("date", "class_name", "student_id", "grade", "name", "department", "feedback")
    assert FieldCatalog.get("feedback").type == FieldType.TEXTAREA
    assert FieldCatalog.position("name") == 4


def test_catalog_unknown_key():
    with pytest.raises(UnknownKey):
        FieldCatalog.get("nickname")


def test_merge_puts_builtins_in_catalog_order_then_custom_order():
    merger = FieldMerger()
    fields = merger.merge([_custom("club"), _custom("hobby")], ["name", "date"])

    assert [f.key for f in fields] == ["date", "name", "club", "hobby"]
    assert [f.order for f in fields] == [0, 1, 2, 3]
    assert fields[0].origin == FieldOrigin.BUILTIN
    assert fields[0].source_key == "date"
    assert all(f.enabled for f in fields)


def test_merge_rejects_custom_key_equal_to_enabled_builtin():
    with pytest.raises(DuplicateFieldKey):
        FieldMerger().merge([_custom("name")], ["name"])


def test_merge_rejects_duplicate_custom_keys():
    with pytest.raises(DuplicateFieldKey):
        FieldMerger().merge([_custom("club"), _custom("club")], [])


def test_custom_key_may_shadow_a_disabled_builtin():
    fields = FieldMerger().merge([_custom("grade")], ["date"])
    assert [f.key for f in fields] == ["date", "grade"]
    assert fields[1].origin == FieldOrigin.CUSTOM


def test_merge_unknown_builtin_key():
    with pytest.raises(UnknownKey):
        FieldMerger().merge([], ["date", "shoe_size"])


def test_merge_rejects_builtin_in_custom_list():
    with pytest.raises(ValidationError):
        FieldMerger().merge([FieldCatalog.instantiate("name")], [])


def test_merge_is_idempotent_through_split():
    merger = FieldMerger()
    merged = merger.merge([_custom("club"), _custom("seat", type=FieldType.NUMBER)], ["date", "name", "grade"])

    again = merger.merge_config(merger.split(merged))

    assert again == merged


def test_disabled_custom_field_goes_after_live_sequence():
    merger = FieldMerger()
    fields = merger.merge([_custom("old", enabled=False), _custom("club")], ["date"])

    assert [(f.key, f.enabled, f.order) for f in fields] == [
        ("date", True, 0),
        ("club", True, 1),
        ("old", False, 2),
    ]


def test_reorder_assigns_index_of_appearance_and_appends_the_rest():
    merger = FieldMerger()
    fields = merger.merge([_custom("club")], ["date", "name"])

    reordered = merger.reorder(fields, ["club", "unknown", "date"])

    assert [(f.key, f.order) for f in reordered] == [("club", 0), ("date", 1), ("name", 2)]


def test_reorder_config_survives_merge():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("club"),), enabled_builtin_keys=("date", "name"))

    config = merger.reorder_config(config, ["name", "club"])

    assert [f.key for f in merger.merge_config(config)] == ["name", "club", "date"]
    assert config.builtin_orders == {"name": 0, "date": 2}


def test_new_custom_field_lands_after_reordered_fields():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("club"),), enabled_builtin_keys=("date", "name"))
    config = merger.reorder_config(config, ["club"])

    config = merger.add_custom(config, _custom("seat"))

    assert [f.key for f in merger.merge_config(config)] == ["club", "date", "name", "seat"]


def test_disable_builtin_keeps_it_retrievable_and_enable_restores():
    merger = FieldMerger()
    config = FormConfig.default()

    config = merger.disable(config, "grade")

    assert "grade" not in [f.key for f in merger.merge_config(config)]
    assert [f.key for f in merger.disabled_builtins(config)] == ["grade"]
    assert merger.disabled_builtins(config)[0].enabled is False

    config = merger.enable(config, "grade")
    assert [f.key for f in merger.merge_config(config)] == list(FieldCatalog.keys())


def test_disabled_builtin_keeps_reordered_position():
    merger = FieldMerger()
    config = FormConfig(enabled_builtin_keys=("date", "name", "feedback"))
    config = merger.reorder_config(config, ["feedback", "name", "date"])

    config = merger.enable(merger.disable(config, "name"), "name")

    assert [f.key for f in merger.merge_config(config)] == ["feedback", "name", "date"]


def test_disable_custom_field_deletes_it():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("club"),), enabled_builtin_keys=("date",))

    config = merger.disable(config, "club")

    assert config.custom_fields == ()
    with pytest.raises(UnknownKey):
        merger.disable(config, "club")


def test_enable_builtin_clashing_with_custom_field():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("grade"),), enabled_builtin_keys=("date",))

    with pytest.raises(DuplicateFieldKey):
        merger.enable(config, "grade")


def test_add_custom_rejects_key_of_enabled_builtin():
    with pytest.raises(DuplicateFieldKey):
        FieldMerger().add_custom(FormConfig.default(), _custom("student_id"))


def test_edit_custom_rename_is_checked():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("club"),), enabled_builtin_keys=("name",))

    with pytest.raises(DuplicateFieldKey):
        merger.edit_custom(config, "club", key="name")

    renamed = merger.edit_custom(config, "club", key="circle", label="Circle")
    assert [f.key for f in renamed.custom_fields] == ["circle"]


def test_edit_custom_type_change_drops_options():
    merger = FieldMerger()
    config = FormConfig(custom_fields=(_custom("year", type=FieldType.SELECT, options=("1", "2")),))

    edited = merger.edit_custom(config, "year", type="text")

    assert edited.custom_fields[0].type == FieldType.TEXT
    assert edited.custom_fields[0].options == ()


def test_edit_custom_cannot_change_origin():
    config = FormConfig(custom_fields=(_custom("club"),))
    with pytest.raises(ValidationError):
        FieldMerger().edit_custom(config, "club", origin="builtin")


def test_enable_unknown_builtin():
    with pytest.raises(UnknownKey):
        FieldMerger().enable(FormConfig(), "shoe_size")
