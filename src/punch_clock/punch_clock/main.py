from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import BREAK_WARNING_HOURS, DEFAULT_HOURLY_RATE
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin, list_tables
from .payroll.controller import register as register_payroll
from .requests.controller import register as register_requests
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

        admin_code = str(getattr(settings, "ADMIN_SECRET_CODE", "") or "")
        if admin_code:
            ensure_admin(db_config, secret_code=admin_code)
        else:
            logger.warning("ADMIN_SECRET_CODE is not set; no admin record created")

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        logger.info("Demo seed ready")


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a ``container`` skips database bootstrap; tests wire in-memory
    repositories that way.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging("DEBUG" if app.config["DEBUG"] else getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(
            db_config=db_config,
            default_hourly_rate=float(getattr(settings, "DEFAULT_HOURLY_RATE", DEFAULT_HOURLY_RATE)),
            break_warning_hours=float(getattr(settings, "BREAK_WARNING_HOURS", BREAK_WARNING_HOURS)),
        )

    register_attendance(app, container)
    register_users(app, container)
    register_payroll(app, container)
    register_requests(app, container)

    return app
