from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_role, error_response, json_body
from ..container import Container
from ..core.exceptions import DomainError
from ..geofence.model import Coordinate


def register(app: Flask, container: Container) -> None:
    submissions = container.submission_service

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_submit")
    def api_attendance_submit():
        """Student submission.

        Body: ``{"course_id", "device_key", "values": {...},
        "location": {"latitude", "longitude"}}``. Any client timestamp is
        ignored.
        """
        body = json_body()
        values = body.get("values")
        if not isinstance(values, dict):
            return jsonify({"success": False, "message": "values must be an object"}), 400

        try:
            location = body.get("location")
            coordinate = Coordinate.from_dict(location) if isinstance(location, dict) else None
            result = submissions.submit(
                course_id=body.get("course_id") or None,
                device_key=str(body.get("device_key") or ""),
                values=values,
                coordinate=coordinate,
            )
        except DomainError as e:
            return error_response(e)

        payload = result.to_dict()
        payload["success"] = result.decision.accepted
        if result.decision.accepted:
            return jsonify(payload), 201
        return jsonify(payload), 403

    @app.route("/api/admin/courses/<course_id>/submissions", methods=["GET"], endpoint="admin_submissions")
    @admin_required
    def admin_submissions(course_id: str):
        try:
            limit = int(request.args.get("limit", 200))
        except ValueError:
            return jsonify({"success": False, "message": "limit must be an integer"}), 400
        try:
            table = submissions.export_rows(current_role=current_role(), course_id=course_id, limit=limit)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "course_id": course_id, **table})
