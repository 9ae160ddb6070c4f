from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, error_response, json_body
from ..container import Container
from ..core.exceptions import DomainError
from .model import FormConfig


def register(app: Flask, container: Container) -> None:
    forms = container.form_config_service

    def _config_payload(course_id: str, config: FormConfig) -> dict:
        return {
            "success": True,
            "course_id": course_id,
            "config": config.to_dict(),
            "fields": [f.to_dict() for f in forms.unified_fields(course_id)],
            "disabled_builtins": [f.to_dict() for f in forms.disabled_builtins(course_id)],
        }

    @app.route("/api/courses/<course_id>/form", methods=["GET"], endpoint="course_form")
    def course_form(course_id: str):
        """Unified field list and initial values for the student form."""
        try:
            compiled = forms.compiled_form(course_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "course_id": course_id,
                "fields": [f.to_dict() for f in compiled.fields],
                "defaults": compiled.defaults,
                "required": list(compiled.schema.required_keys),
            }
        )

    @app.route("/api/admin/courses/<course_id>/form-config", methods=["GET"], endpoint="admin_form_config")
    @admin_required
    def admin_form_config(course_id: str):
        try:
            return jsonify(_config_payload(course_id, forms.get_config(course_id)))
        except DomainError as e:
            return error_response(e)

    @app.route("/api/admin/courses/<course_id>/form-config", methods=["POST"], endpoint="admin_form_config_save")
    @admin_required
    def admin_form_config_save(course_id: str):
        try:
            config = FormConfig.from_dict(json_body())
            forms.save_config(current_role=current_role(), course_id=course_id, config=config)
            return jsonify(_config_payload(course_id, forms.get_config(course_id)))
        except DomainError as e:
            return error_response(e)

    @app.route("/api/admin/courses/<course_id>/form-config/fields", methods=["POST"], endpoint="admin_field_add")
    @admin_required
    def admin_field_add(course_id: str):
        try:
            config = forms.add_custom_field(current_role=current_role(), course_id=course_id, field=json_body())
            return jsonify(_config_payload(course_id, config)), 201
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/admin/courses/<course_id>/form-config/fields/<key>",
        methods=["PATCH"],
        endpoint="admin_field_edit",
    )
    @admin_required
    def admin_field_edit(course_id: str, key: str):
        try:
            config = forms.edit_custom_field(
                current_role=current_role(), course_id=course_id, key=key, changes=json_body()
            )
            return jsonify(_config_payload(course_id, config))
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/admin/courses/<course_id>/form-config/fields/<key>",
        methods=["DELETE"],
        endpoint="admin_field_remove",
    )
    @admin_required
    def admin_field_remove(course_id: str, key: str):
        try:
            config = forms.remove_custom_field(current_role=current_role(), course_id=course_id, key=key)
            return jsonify(_config_payload(course_id, config))
        except DomainError as e:
            return error_response(e)

    @app.route("/api/admin/courses/<course_id>/form-config/reorder", methods=["POST"], endpoint="admin_reorder")
    @admin_required
    def admin_reorder(course_id: str):
        order = json_body().get("order") or []
        if not isinstance(order, list):
            return jsonify({"success": False, "message": "order must be a list of field keys"}), 400
        try:
            config = forms.reorder(current_role=current_role(), course_id=course_id, sequence=[str(k) for k in order])
            return jsonify(_config_payload(course_id, config))
        except DomainError as e:
            return error_response(e)

    @app.route("/api/admin/courses/<course_id>/form-config/toggle", methods=["POST"], endpoint="admin_toggle")
    @admin_required
    def admin_toggle(course_id: str):
        body = json_body()
        key = str(body.get("key") or "")
        try:
            config = forms.toggle_field(
                current_role=current_role(),
                course_id=course_id,
                key=key,
                enabled=bool(body.get("enabled", True)),
            )
            return jsonify(_config_payload(course_id, config))
        except DomainError as e:
            return error_response(e)
