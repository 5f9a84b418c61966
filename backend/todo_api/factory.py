"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from todo_api.core.config import BaseConfig, get_config, validate_config
from todo_api.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object or import path; defaults to the class
        selected by ``APP_ENV``.
    :raises RuntimeError: When :func:`validate_config` rejects the settings.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate_config(app.config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from todo_api.core import security

    security.init_app(app)

    from todo_api.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from todo_api.core import cors

    cors.init_app(app)

    from todo_api.api import init_app as init_api

    init_api(app)

    from todo_api.core import errors

    errors.init_app(app)

    return app
