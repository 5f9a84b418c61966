"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from todo_api.api.deps import json_response, timing
from todo_api.core.extensions import db, get_cache, limiter

bp = Blueprint("health", __name__)


@bp.get("/health")
@limiter.exempt
@timing
def healthcheck():
    """Return application, database and cache health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    cache_status = "ok" if get_cache().enabled else "disabled"
    version = current_app.config.get("APP_VERSION", "dev")
    payload = {"status": "ok", "db": db_status, "cache": cache_status, "version": version}
    return json_response(payload)
