from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, ServiceSettings, build_container
from .database.bootstrap import apply_schema
from .database.connection import DBConfig
from .forms.controller import register as register_forms
from .geofence.controller import register as register_geofence
from .submissions.controller import register as register_submissions

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    service_settings = ServiceSettings.from_settings(settings)

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
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(DBConfig.from_mapping(db_config), schema_path=schema_path)
        container = build_container(db_config=db_config, settings=service_settings)

    if service_settings.bypass_geofence and not app.config["DEBUG"]:
        raise RuntimeError("GEOFENCE_BYPASS is only allowed with DEBUG enabled")

    register_forms(app, container)
    register_geofence(app, container)
    register_submissions(app, container)

    return app
