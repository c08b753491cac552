from __future__ import annotations

import atexit
import importlib
from datetime import timedelta
from types import SimpleNamespace
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.datetime_utils import now_local
from .common.logging_config import configure_logging, get_logger
from .common.web import error_response
from .core.constants import DEFAULT_SESSION_DAYS, DEFAULT_SWEEP_INTERVAL_SECONDS, DEFAULT_TIMEZONE
from .core.exceptions import DomainError, StorageError
from .container import Container, build_container
from .ledger.controller import register as register_ledger
from .payroll.controller import register as register_payroll
from .storage.bootstrap import ensure_admin
from .workers.controller import register as register_workers

log = get_logger("app")


def _load_settings(overrides: Optional[Mapping[str, Any]]) -> tuple[str, SimpleNamespace]:
    settings_module = get_settings_module()
    module = importlib.import_module(settings_module)
    values = {k: getattr(module, k) for k in dir(module) if k.isupper()}
    values.update(overrides or {})
    return settings_module, SimpleNamespace(**values)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module, settings = _load_settings(overrides)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    roster_path = str(getattr(settings, "ROSTER_PATH"))
    timezone = getattr(settings, "ORG_TIMEZONE", DEFAULT_TIMEZONE)
    sweep_interval = float(getattr(settings, "SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS))
    log.info("settings=%s roster=%s tz=%s sweep_every=%ss", settings_module, roster_path, timezone, sweep_interval)

    container = build_container(
        roster_path=roster_path,
        timezone=timezone,
        sweep_interval_seconds=sweep_interval,
    )
    app.extensions["timekeeping"] = container

    if bool(getattr(settings, "AUTO_SEED_ADMIN", False)):
        ensure_admin(
            container.roster_repo,
            username=getattr(settings, "ADMIN_USERNAME", "admin"),
            password=getattr(settings, "ADMIN_PASSWORD", "admin123"),
            now=now_local(container.tz),
        )

    _register_error_handlers(app)

    register_workers(app, container)
    register_ledger(app, container)
    register_payroll(app, container)

    if container.sweeper is not None:
        container.sweeper.start()
        atexit.register(container.sweeper.stop)

    return app


def get_container(app: Flask) -> Container:
    return app.extensions["timekeeping"]


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_response(e)

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        log.exception("roster storage failure")
        return jsonify(success=False, code="storage_error", message="Lỗi hệ thống"), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        log.exception("unhandled error")
        if bool(app.config.get("DEBUG", False)):
            return jsonify(success=False, code="internal_error", message=f"Lỗi hệ thống: {e}"), 500
        return jsonify(success=False, code="internal_error", message="Lỗi hệ thống"), 500
