from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import ValidationError
from .service import ScheduleService


def register(app: Flask, container: Container) -> None:
    def _parse_date(value) -> date:
        try:
            return parse_iso_date(str(value)) if value else date.today()
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

    @app.route("/api/schedule", methods=["GET"], endpoint="schedule_list")
    def schedule_list():
        day = _parse_date(request.args.get("date"))
        return jsonify(ScheduleService.classes_on(container.session.current(), day))

    @app.route("/api/schedule", methods=["POST"], endpoint="schedule_add")
    def schedule_add():
        body = request.get_json(silent=True) or {}
        class_id = container.schedule_service.add_class(
            on=_parse_date(body.get("date")),
            title=body.get("title", ""),
            start_time=str(body.get("startTime") or ""),
            end_time=str(body.get("endTime") or ""),
            course_id=body.get("courseId"),
        )
        return jsonify({"id": class_id}), 201

    @app.route("/api/schedule/<class_id>", methods=["DELETE"], endpoint="schedule_delete")
    def schedule_delete(class_id: str):
        container.schedule_service.delete_class(class_id)
        return jsonify({"ok": True})
