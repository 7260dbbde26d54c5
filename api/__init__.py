from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, DEV_JWT_SECRET
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services.directory import UserDirectory
from services.exceptions import ConfigFailure
from services.ledger import RefreshTokenLedger
from services.session_manager import SessionManager
from services.settings import AuthSettings

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Task Auth API",
        "version": "1.0.0",
        "description": "Signup, login, refresh-token rotation, logout and per-user tasks.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_session_manager(config) -> SessionManager:
    """Freeze the auth settings and wire the session manager to the shared storage."""
    settings = AuthSettings.from_mapping(config)
    return SessionManager(
        settings,
        UserDirectory(storage),
        RefreshTokenLedger(storage),
        storage,
    )


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Raises ConfigFailure when the signing secret is missing.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    if not app.debug and not app.testing and app.config.get("JWT_SECRET") == DEV_JWT_SECRET:
        raise ConfigFailure("Refusing to start with the development JWT secret")
    app.extensions["session_manager"] = build_session_manager(app.config)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, resources={r"/*": {"origins": origins}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .tasks import bp as tasks_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(tasks_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    # This calls scoped_session.remove(), preventing connection leaks
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Task Auth API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
