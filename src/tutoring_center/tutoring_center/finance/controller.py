from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..container import Container
from .service import total_revenue


def register(app: Flask, container: Container) -> None:
    @app.route("/api/finance", methods=["GET"], endpoint="finance_list")
    def finance_list():
        snapshot = container.session.current()
        return jsonify({"entries": list(snapshot.finance), "total": total_revenue(snapshot)})

    @app.route("/api/finance", methods=["POST"], endpoint="finance_add")
    def finance_add():
        entry_id = container.finance_service.add_transaction(request.get_json(silent=True) or {})
        return jsonify({"id": entry_id}), 201

    @app.route("/api/finance/<entry_id>", methods=["DELETE"], endpoint="finance_delete")
    def finance_delete(entry_id: str):
        container.finance_service.delete_transaction(entry_id)
        return jsonify({"ok": True})

    @app.route("/api/deductions/run", methods=["POST"], endpoint="deductions_run")
    def deductions_run():
        report = container.deduction_engine.process_daily_deductions(container.session.current(), now_local())
        return jsonify(
            {
                "date": report.date,
                "processed": report.processed,
                "skipped": report.skipped,
                "failed": report.failed,
                "totalCharged": report.total_charged,
            }
        )
