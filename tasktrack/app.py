import logging
import time

import click
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from firebase_admin import firestore

from .api import users_bp, tasks_bp
from .config.firebase_config import init_firebase
from .config.settings import Settings
from .middleware.error_middleware import ApiError, register_error_handlers
from .models.user_model import UserModel
from .services.auth_service import AuthService
from .services.session_service import SessionService

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional mapping overriding values loaded from the
            environment. With ``TESTING`` set, Firebase is not initialised
            and the caller is expected to provide a Firestore client.
    """
    app = Flask(__name__)
    app.config.update(Settings.as_dict())
    if config:
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'])
    Settings.validate(app.config)

    CORS(app,
         resources={r"/api/*": {"origins": app.config['CORS_URL']}},
         supports_credentials=True)

    app.extensions['session_service'] = SessionService(
        app.config['JWT_SECRET'],
        algorithm=app.config['JWT_ALGORITHM'],
        ttl_seconds=app.config['TOKEN_TTL_SECONDS'],
    )

    firebase_initialized = True if app.config.get('TESTING') else init_firebase()
    if not firebase_initialized:
        logger.warning("Firestore is not configured; store-backed endpoints will fail")

    @app.get("/")
    def health():
        return jsonify({
            "status": "ok",
            "service": "tasktrack-api",
            "firebase": "connected" if firebase_initialized else "not configured"
        }), 200

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        elapsed_ms = (time.perf_counter() - g.get('request_started', time.perf_counter())) * 1000
        logger.info(f"{request.method} {request.path} {response.status_code} {elapsed_ms:.1f} ms")
        return response

    register_error_handlers(app)

    app.register_blueprint(users_bp)
    app.register_blueprint(tasks_bp)

    register_commands(app)

    return app


def register_commands(app):

    @app.cli.command("set-role")
    @click.argument("email")
    @click.argument("role", type=click.Choice(["Manager", "Employee"]))
    def set_role(email, role):
        """Give the account registered under EMAIL the Manager or Employee role."""
        service = AuthService(UserModel(firestore.client()), app.extensions['session_service'])
        try:
            user = service.set_role(email, role)
        except ApiError as e:
            raise click.ClickException(e.message)
        click.echo(f"{user['email']} ({user['id']}) is now {user['role']}")


def main():
    """Main entry point for running the application."""
    app = create_app()
    app.run(host="0.0.0.0", port=app.config['PORT'], debug=app.config['DEBUG'])


if __name__ == "__main__":  # pragma: no cover
    main()
