from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings", methods=["GET"], endpoint="settings_get")
    def settings_get():
        return jsonify(container.settings_service.get_settings().to_doc())

    @app.route("/api/settings", methods=["PUT", "PATCH"], endpoint="settings_update")
    def settings_update():
        settings = container.settings_service.update_settings(request.get_json(silent=True) or {})
        return jsonify(settings.to_doc())
