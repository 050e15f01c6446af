from flask import Flask, jsonify, send_from_directory
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_cors import CORS
from loguru import logger

from smart_library.config import config

db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()


def create_app(config_name='default'):
    """Application factory pattern"""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    from smart_library.logger_config import configure_logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    # Configure CORS
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "expose_headers": ["Content-Type", "Authorization", "Content-Disposition"],
            "supports_credentials": True,
            "max_age": 3600
        }
    })

    # JWT error handlers
    from smart_library.utils.jwt_handlers import register_jwt_handlers
    register_jwt_handlers(jwt)

    # Disable strict slashes globally for all blueprints to avoid 308 redirects on OPTIONS
    app.url_map.strict_slashes = False

    from smart_library.routes import register_blueprints
    register_blueprints(app)

    # Error handlers
    from smart_library.utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    from smart_library.cli import register_commands
    register_commands(app)

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        """Serve uploaded images"""
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    @app.route('/health')
    @app.route('/api/health')
    def health():
        return jsonify({'status': 'OK', 'message': 'Server is running'}), 200

    logger.info('Application created with {} config', config_name)

    return app
