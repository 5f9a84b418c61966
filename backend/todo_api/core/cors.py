"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints based on ``CORS_ORIGINS``.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` (comma-separated, from
        ``ALLOWED_ORIGINS``) and ``CORS_MAX_AGE`` settings are consulted.
        A blank value or ``"*"`` allows any origin without credentials.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
