# solplan/__init__.py
import logging
from typing import Optional

from flask import Flask

from solplan.config import Settings, load_environment
from solplan.debounce import DebouncedRunner

__all__ = ["create_app", "DebouncedRunner", "Settings"]


def create_app(settings: Optional[Settings] = None):
    app = Flask(__name__)

    # Load config from .env.local / .env unless settings were handed in
    if settings is None:
        load_environment()
        settings = Settings.from_env()
    app.config.from_mapping(settings.to_flask_config())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register Blueprints
    from solplan.routes import bp_projection
    app.register_blueprint(bp_projection)

    return app
