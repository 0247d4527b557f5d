from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import NotFoundError
from ..dashboard.service import debtors, student_attendance_history, student_payments


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    def students_list():
        snapshot = container.session.current()
        if request.args.get("filter") == "debtors":
            return jsonify(debtors(snapshot))
        return jsonify(list(snapshot.students))

    @app.route("/api/students", methods=["POST"], endpoint="students_add")
    def students_add():
        student_id = container.student_service.add_student(request.get_json(silent=True) or {})
        return jsonify({"id": student_id}), 201

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="students_detail")
    def students_detail(student_id: str):
        snapshot = container.session.current()
        student = snapshot.student(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return jsonify(
            {
                "student": student,
                "course": snapshot.course(student.assigned_course_id),
                "payments": student_payments(snapshot, student),
                "attendance": student_attendance_history(snapshot, student.id),
            }
        )

    @app.route("/api/students/<student_id>", methods=["PATCH"], endpoint="students_update")
    def students_update(student_id: str):
        container.student_service.update_student(student_id, request.get_json(silent=True) or {})
        return jsonify({"ok": True})

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="students_delete")
    def students_delete(student_id: str):
        container.student_service.delete_student(student_id)
        return jsonify({"ok": True})

    @app.route("/api/students/<student_id>/transactions", methods=["POST"], endpoint="students_transaction")
    def students_transaction(student_id: str):
        body = request.get_json(silent=True) or {}
        entry_id = container.student_service.record_transaction(student_id, body.get("amount"), body.get("kind", ""))
        return jsonify({"id": entry_id}), 201
