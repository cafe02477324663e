from flask import Flask, request
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException
import structlog

from .extensions import db, cors
from .config import Config, Settings
from .errors import EmergencyIdError, StoreUnavailable, error_payload
from .logging_config import configure_logging
from .services import EXTENSION_KEY, build_services

log = structlog.get_logger(__name__)


def create_app(config_class: type = Config) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    configure_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])

    db.init_app(app)
    cors.init_app(app)

    settings = Settings.from_mapping(app.config)
    app.extensions[EXTENSION_KEY] = build_services(settings)
    if not app.testing:
        for name in settings.insecure_defaults():
            log.warning("insecure_default_config", setting=name)

    @app.before_request
    def _log_req():
        log.info("request", method=request.method, path=request.path,
                 content_type=request.headers.get("Content-Type"),
                 authorization=bool(request.headers.get("Authorization")))

    @app.errorhandler(EmergencyIdError)
    def _domain_error(e):
        return e.to_response()

    @app.errorhandler(OperationalError)
    def _store_error(e):
        db.session.rollback()
        log.error("store_unavailable", error=str(e.orig))
        return StoreUnavailable().to_response()

    @app.errorhandler(HTTPException)
    def _http_error(e):
        code = (e.name or "error").lower().replace(" ", "_")
        return error_payload(code, e.code or 500, e.description or e.name)

    @app.get("/health")
    @app.get("/api/health")
    def health():
        try:
            db.session.execute(text("SELECT 1"))
            db_status = "Connected"
        except OperationalError:
            db.session.rollback()
            db_status = "Disconnected"
        return {"status": "OK", "db": db_status}, 200

    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        print("Database initialized:", db.engine.url.render_as_string(hide_password=True))

    # register blueprints
    from .routes.auth import auth_bp
    app.register_blueprint(auth_bp)

    from .routes.patient import patient_bp
    app.register_blueprint(patient_bp)

    from .routes.doctor import doctor_bp
    app.register_blueprint(doctor_bp)

    with app.app_context():
        try:
            db.create_all()
        except OperationalError as e:
            log.error("store_unavailable", stage="create_all", error=str(e.orig))

    return app
