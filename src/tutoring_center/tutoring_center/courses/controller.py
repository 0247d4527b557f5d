from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.exceptions import NotFoundError
from ..dashboard.service import course_derived_status, course_roster


def register(app: Flask, container: Container) -> None:
    @app.route("/api/courses", methods=["GET"], endpoint="courses_list")
    def courses_list():
        snapshot = container.session.current()
        now = now_local()
        return jsonify(
            [
                {**vars(course), "derivedStatus": course_derived_status(course, now).value}
                for course in snapshot.courses
            ]
        )

    @app.route("/api/courses", methods=["POST"], endpoint="courses_add")
    def courses_add():
        course_id = container.course_service.add_course(request.get_json(silent=True) or {})
        return jsonify({"id": course_id}), 201

    @app.route("/api/courses/<course_id>", methods=["GET"], endpoint="courses_detail")
    def courses_detail(course_id: str):
        snapshot = container.session.current()
        course = snapshot.course(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return jsonify(
            {
                "course": course,
                "derivedStatus": course_derived_status(course, now_local()).value,
                "students": course_roster(snapshot, course),
            }
        )

    @app.route("/api/courses/<course_id>", methods=["PATCH"], endpoint="courses_update")
    def courses_update(course_id: str):
        container.course_service.update_course(course_id, request.get_json(silent=True) or {})
        return jsonify({"ok": True})

    @app.route("/api/courses/<course_id>", methods=["DELETE"], endpoint="courses_delete")
    def courses_delete(course_id: str):
        unassigned = container.course_service.delete_course(course_id)
        return jsonify({"ok": True, "unassigned": unassigned})
