from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leads", methods=["GET"], endpoint="leads_list")
    def leads_list():
        return jsonify(list(container.session.current().leads))

    @app.route("/api/leads", methods=["POST"], endpoint="leads_add")
    def leads_add():
        lead_id = container.lead_service.add_lead(request.get_json(silent=True) or {})
        return jsonify({"id": lead_id}), 201

    @app.route("/api/leads/<lead_id>", methods=["PATCH"], endpoint="leads_update")
    def leads_update(lead_id: str):
        body = dict(request.get_json(silent=True) or {})
        status = body.pop("status", None)
        if body:
            container.lead_service.update_lead(lead_id, body)
        if status is not None:
            container.lead_service.update_lead_status(lead_id, status)
        return jsonify({"ok": True})

    @app.route("/api/leads/<lead_id>", methods=["DELETE"], endpoint="leads_delete")
    def leads_delete(lead_id: str):
        container.lead_service.delete_lead(lead_id)
        return jsonify({"ok": True})

    @app.route("/api/leads/<lead_id>/convert", methods=["POST"], endpoint="leads_convert")
    def leads_convert(lead_id: str):
        student_id = container.lead_service.convert_to_student(lead_id)
        return jsonify({"studentId": student_id}), 201
