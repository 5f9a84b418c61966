"""Reverse-proxy awareness and baseline security headers."""

from __future__ import annotations

from flask import Flask, Response
from werkzeug.middleware.proxy_fix import ProxyFix

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"


def init_app(app: Flask) -> None:
    """Apply ``ProxyFix`` and stamp security headers on every response.

    Parameters
    ----------
    app: flask.Flask
        Application to configure.

    Notes
    -----
    ``USE_PROXYFIX`` (default ``True``) trusts a single hop of
    ``X-Forwarded-*`` headers, which also makes the rate limiter key on the
    real client address. ``ENABLE_HSTS`` adds ``Strict-Transport-Security``.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    enable_hsts = bool(app.config.get("ENABLE_HSTS", False))

    @app.after_request
    def _security_headers(response: Response) -> Response:
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if enable_hsts:
            response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        return response
