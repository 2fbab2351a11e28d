import logging
import os

from dotenv import load_dotenv
from flask import Flask

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

logger = logging.getLogger(__name__)


def _mask_url_password(url: str) -> str:
    import re

    return re.sub(r"(://[^:/?#]+):[^@]*@", r"\1:***@", url)


def create_app(config_overrides=None):
    """Build the Flask app.

    ``config_overrides`` is applied to ``app.config`` before anything else;
    tests use it to set ``TESTING`` and to inject a ``RECORD_STORE_FACTORY``.
    """
    from .core import config
    from .core.logging_config import setup_logging

    app = Flask(__name__)
    app.config["DATABASE_URL"] = config.get_database_url()
    app.config["EXPIRING_THRESHOLD_DAYS"] = config.EXPIRING_THRESHOLD_DAYS
    app.config["PAYMENT_GRACE_DAYS"] = config.PAYMENT_GRACE_DAYS
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(
        app=app,  # Pass app to register request/response hooks
        log_level=config.LOG_LEVEL,
        enable_sql_echo=config.LOG_LEVEL.upper() == "DEBUG",
        log_to_file=config.LOG_TO_FILE and not app.config.get("TESTING"),
        use_json_format=config.LOG_JSON,
    )
    logger.info(
        "Database configured",
        extra={"context": {"database_url": _mask_url_password(app.config["DATABASE_URL"])}},
    )
    config.log_membership_config()

    if app.config.get("RECORD_STORE_FACTORY") is None:
        from .db.session import create_tables

        create_tables()

    from .controllers import health_bp, members_bp, payments_bp, plans_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(plans_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(payments_bp)

    logger.info(
        "Application started",
        extra={"context": {"blueprints": sorted(app.blueprints)}},
    )
    return app


if __name__ == "__main__":
    create_app().run(debug=os.getenv("FLASK_ENV") == "development")
