"""Flask application factory."""

from __future__ import annotations

from flask import Flask

from sucat.core.config import BaseConfig, get_config
from sucat.core.logger import configure_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the app: settings, extensions, API, error handlers and CLI.

    :param config: Settings object or import path; ``APP_ENV`` decides when
        omitted.
    :param instance_config_filename: Optional overrides read from the
        instance folder (missing file is fine).
    """
    from sucat import cli
    from sucat.api import init_app as init_api
    from sucat.core import cors, errors, extensions, logger, proxy

    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Order matters: the token service needs the db and redis extensions,
    # and error handlers must see every blueprint.
    for component in (proxy, extensions, logger, cors):
        component.init_app(app)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)

    return app
