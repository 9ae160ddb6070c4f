from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_role, error_response, json_body
from ..container import Container
from ..core.exceptions import DomainError
from .model import LocationConfig


def register(app: Flask, container: Container) -> None:
    locations = container.location_service

    def _zone(config):
        return config.to_dict() if config else None

    @app.route("/api/admin/location-settings", methods=["GET"], endpoint="admin_location_settings")
    @admin_required
    def admin_location_settings():
        return jsonify({"success": True, "default_location": _zone(locations.get_global())})

    @app.route("/api/admin/location-settings", methods=["POST"], endpoint="admin_location_settings_save")
    @admin_required
    def admin_location_settings_save():
        try:
            config = LocationConfig.from_dict(json_body())
            locations.save_global(current_role=current_role(), config=config)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "default_location": config.to_dict()})

    @app.route("/api/admin/courses/<course_id>/location", methods=["GET"], endpoint="admin_course_location")
    @admin_required
    def admin_course_location(course_id: str):
        try:
            override = locations.get_course_override(course_id)
            effective = locations.resolve_zone(course_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "override": _zone(override), "effective": _zone(effective)})

    @app.route("/api/admin/courses/<course_id>/location", methods=["POST"], endpoint="admin_course_location_save")
    @admin_required
    def admin_course_location_save(course_id: str):
        try:
            config = LocationConfig.from_dict(json_body())
            locations.save_course_override(current_role=current_role(), course_id=course_id, config=config)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "override": config.to_dict()})

    @app.route(
        "/api/admin/courses/<course_id>/location",
        methods=["DELETE"],
        endpoint="admin_course_location_clear",
    )
    @admin_required
    def admin_course_location_clear(course_id: str):
        try:
            removed = locations.clear_course_override(current_role=current_role(), course_id=course_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "removed": removed})
