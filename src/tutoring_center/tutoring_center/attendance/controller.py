from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    def _parse_date(value) -> date:
        if not value:
            return date.today()
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

    def _course(snapshot, course_id: str):
        course = snapshot.course(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course

    @app.route("/api/courses/<course_id>/attendance", methods=["GET"], endpoint="attendance_sheet")
    def attendance_sheet(course_id: str):
        snapshot = container.session.current()
        sheet = container.attendance_service.build_marks(
            _course(snapshot, course_id),
            _parse_date(request.args.get("date")),
            snapshot=snapshot,
        )
        return jsonify(
            {
                "recordId": sheet.record_id,
                "isEditing": sheet.is_editing,
                "students": {sid: m.to_dict() for sid, m in sheet.marks.items()},
            }
        )

    @app.route("/api/courses/<course_id>/attendance", methods=["POST"], endpoint="attendance_save")
    def attendance_save(course_id: str):
        body = request.get_json(silent=True) or {}
        snapshot = container.session.current()
        record = container.attendance_service.save_or_update_attendance(
            _course(snapshot, course_id),
            _parse_date(body.get("date")),
            body.get("students") or {},
            snapshot=snapshot,
        )
        present, absent = record.counts()
        return jsonify({"id": record.id, "date": record.date, "present": present, "absent": absent})

    @app.route("/api/attendance/sync", methods=["GET"], endpoint="attendance_sync_status")
    def attendance_sync_status():
        queue = container.sync_queue
        return jsonify(
            {
                "pending": len(queue.pending),
                "deadLetters": [
                    {"id": t.task_id, "attempts": t.attempts, "error": t.last_error, "date": t.payload.get("date")}
                    for t in queue.dead_letters
                ],
            }
        )

    @app.route("/api/attendance/sync", methods=["POST"], endpoint="attendance_sync_flush")
    def attendance_sync_flush():
        result = container.sync_queue.flush()
        return jsonify({"sent": result.sent, "retried": result.retried, "dead": result.dead})
