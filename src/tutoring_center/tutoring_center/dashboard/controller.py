from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import iso_date, now_local, parse_iso_date
from ..container import Container
from ..core.exceptions import ValidationError
from ..schedules.service import ScheduleService
from .service import dashboard_stats, lessons_on


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    def dashboard():
        snapshot = container.session.current()
        now = now_local()
        raw = request.args.get("date")
        try:
            day = parse_iso_date(raw) if raw else now.date()
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

        return jsonify(
            {
                "stats": dashboard_stats(snapshot, now),
                "date": iso_date(day),
                "lessons": lessons_on(snapshot, day),
                "classes": ScheduleService.classes_on(snapshot, day),
                "activities": list(snapshot.activities[:10]),
            }
        )
