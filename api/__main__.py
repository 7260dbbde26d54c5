"""
Entrypoint for running the API in development.
In production run create_app() behind a WSGI server (gunicorn/uwsgi).
"""
import logging
import os
from . import create_app
from utils.validators import parse_bool

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()

logging.basicConfig(
    level=app.config.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

if __name__ == "__main__":
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("AUTH_SERVICE_PORT", os.getenv("FLASK_RUN_PORT", "8080")))
    debug = parse_bool(os.getenv("FLASK_DEBUG", app.config.get("DEBUG", True)))
    app.run(host=host, port=port, debug=debug)
