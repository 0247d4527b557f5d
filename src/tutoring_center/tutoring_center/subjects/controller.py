from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/subjects", methods=["GET"], endpoint="subjects_list")
    def subjects_list():
        return jsonify(list(container.session.current().subjects))

    @app.route("/api/subjects", methods=["POST"], endpoint="subjects_add")
    def subjects_add():
        subject_id = container.subject_service.add_subject(request.get_json(silent=True) or {})
        return jsonify({"id": subject_id}), 201

    @app.route("/api/subjects/<subject_id>", methods=["PATCH"], endpoint="subjects_update")
    def subjects_update(subject_id: str):
        container.subject_service.update_subject(subject_id, request.get_json(silent=True) or {})
        return jsonify({"ok": True})

    @app.route("/api/subjects/<subject_id>", methods=["DELETE"], endpoint="subjects_delete")
    def subjects_delete(subject_id: str):
        container.subject_service.delete_subject(subject_id)
        return jsonify({"ok": True})
