from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teachers", methods=["GET"], endpoint="teachers_list")
    def teachers_list():
        return jsonify(list(container.session.current().teachers))

    @app.route("/api/teachers", methods=["POST"], endpoint="teachers_add")
    def teachers_add():
        teacher_id = container.teacher_service.add_teacher(request.get_json(silent=True) or {})
        return jsonify({"id": teacher_id}), 201

    @app.route("/api/teachers/<teacher_id>", methods=["PATCH"], endpoint="teachers_update")
    def teachers_update(teacher_id: str):
        container.teacher_service.update_teacher(teacher_id, request.get_json(silent=True) or {})
        return jsonify({"ok": True})

    @app.route("/api/teachers/<teacher_id>", methods=["DELETE"], endpoint="teachers_delete")
    def teachers_delete(teacher_id: str):
        container.teacher_service.delete_teacher(teacher_id)
        return jsonify({"ok": True})
