# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Flask, jsonify

from .config import Config, ensure_instance
from .extensions import db, migrate
from .services import init_services
from .periods import current_period

# блюпринты
from .modules.schedule import bp as schedule_bp
from .modules.payroll import bp as payroll_bp

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def create_app(overrides: dict | None = None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    ensure_instance(app)

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("backoffice").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)

    # модели должны быть зарегистрированы до create_all/миграций
    from . import models  # noqa: F401

    init_services(app)

    # --- блюпринты ---
    app.register_blueprint(schedule_bp)
    app.register_blueprint(payroll_bp)

    # --- главная ---
    @app.route("/")
    def home():
        return jsonify({"ok": True, "current_period": current_period().to_dict()})

    return app
