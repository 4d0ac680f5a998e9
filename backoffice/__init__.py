from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
from .config import Config
from .errors import BackofficeError
from .realtime.hub import ChangeHub
from .storage.client import StorageClient
import logging
import logging.config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
hub = ChangeHub()
object_storage = StorageClient()

logger = logging.getLogger(__name__)

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize logging
    logging.config.dictConfig(app.config['LOGGING'])

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    hub.init_app(app)
    object_storage.init_app(app)
    login_manager.login_view = 'auth.login'

    from .auth.credentials import StaticCredentialVerifier
    app.extensions['credentials'] = StaticCredentialVerifier.from_config(app.config)

    # Register blueprints
    from .routes.main import main_bp
    from .routes.auth import auth_bp
    from .routes.dashboard import dashboard_bp
    from .routes.api import api_bp
    from .routes.realtime import realtime_bp
    from .routes.storage import storage_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(realtime_bp, url_prefix='/realtime')
    app.register_blueprint(storage_bp, url_prefix='/storage')

    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    return app


def register_error_handlers(app):
    @app.errorhandler(BackofficeError)
    def handle_backoffice_error(error):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500
