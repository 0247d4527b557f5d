from __future__ import annotations

import logging
import uuid
from typing import Optional

import httpx
from dotenv import load_dotenv
from flask import Flask, g, jsonify, request

from config import load_settings

from .common.datetime_utils import now_local
from .container import build_container
from .core.exceptions import AlreadyExistsError, DomainError, NotFoundError, StoreError, ValidationError
from .core.logging_config import request_id_var, setup_logging
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .store.document_store import DocumentStore

from .attendance.controller import register as register_attendance
from .courses.controller import register as register_courses
from .dashboard.controller import register as register_dashboard
from .finance.controller import register as register_finance
from .leads.controller import register as register_leads
from .schedules.controller import register as register_schedules
from .settings.controller import register as register_settings
from .students.controller import register as register_students
from .subjects.controller import register as register_subjects
from .teachers.controller import register as register_teachers

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return jsonify({"error": str(e)}), 422

    @app.errorhandler(AlreadyExistsError)
    def _conflict(e: AlreadyExistsError):
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(StoreError)
    def _store(e: StoreError):
        logger.exception("Store failure")
        return jsonify({"error": "Storage is unavailable, try again"}), 503


def create_app(
    settings_module: Optional[str] = None,
    *,
    store: Optional[DocumentStore] = None,
    http_client: Optional[httpx.Client] = None,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = load_settings(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        to_file=bool(getattr(settings, "LOG_TO_FILE", False)),
        file_path=str(getattr(settings, "LOG_FILE_PATH", "logs/tutoring_center.log")),
    )

    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    logger.info("Starting tutoring-center (settings=%s, store=%s)", settings.__name__, backend)

    if store is None and backend == "mysql" and getattr(settings, "AUTO_INIT_DB", False):
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        apply_schema(conn)
        logger.info("Schema ready (tables=%d)", len(list_tables(conn)))

    container = build_container(settings, store=store, http_client=http_client)
    app.extensions["tutoring_center"] = container

    @app.before_request
    def _bind_request_id():
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_id = rid
        request_id_var.set(rid)

    if getattr(settings, "AUTO_DEDUCTION", True):

        @app.before_request
        def _run_due_deductions():
            # Deductions run on activity, at most once per DEDUCTION_CHECK_MINUTES
            try:
                container.deduction_trigger.maybe_run(now_local())
            except Exception:
                logger.exception("Scheduled deduction check failed")

    @app.after_request
    def _echo_request_id(response):
        response.headers["X-Request-ID"] = g.get("request_id", "-")
        return response

    @app.teardown_request
    def _reset_request_id(_exc):
        request_id_var.set("-")

    _register_error_handlers(app)

    register_dashboard(app, container)
    register_students(app, container)
    register_teachers(app, container)
    register_courses(app, container)
    register_subjects(app, container)
    register_schedules(app, container)
    register_attendance(app, container)
    register_finance(app, container)
    register_leads(app, container)
    register_settings(app, container)

    return app
