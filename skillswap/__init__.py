import os
import click
from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
socketio = SocketIO()


def create_app(config_object='skillswap.config.Config', test_config=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Socket handlers must be registered before socketio.init_app builds the server
    from skillswap import events  # noqa: F401

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    socketio.init_app(app, cors_allowed_origins=app.config['CORS_ORIGINS'] or '*')
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Authorization", "Content-Type"],
            "expose_headers": ["Authorization"],
            "supports_credentials": True,
        }
    })

    uploads_folder = app.config['UPLOAD_FOLDER']

    @app.route('/uploads/<path:filename>', methods=['GET'])
    def serve_upload(filename):
        """Serve files from the uploads directory."""
        full_path = os.path.join(uploads_folder, filename)
        if not os.path.exists(full_path):
            app.logger.debug(f"[DEBUG] Upload not found: {full_path}")
            return jsonify({'message': 'File not found'}), 404
        return send_from_directory(uploads_folder, filename)

    register_error_handlers(app)
    register_commands(app)

    # Create tables if they don't exist
    with app.app_context():
        from skillswap import models  # noqa: F401
        create_tables()

    # Import and register Blueprints
    from skillswap.auth_routes import auth_bp
    from skillswap.user_routes import user_bp
    from skillswap.skill_routes import skill_bp
    from skillswap.swap_routes import swap_bp
    from skillswap.admin_routes import admin_bp
    from skillswap.message_routes import message_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(user_bp, url_prefix='/api/users')
    app.register_blueprint(skill_bp, url_prefix='/api/skills')
    app.register_blueprint(swap_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(message_bp, url_prefix='/api/platform-messages')

    return app


def create_tables():
    db.create_all()


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'message': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'message': 'Method not allowed'}), 405

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({'message': 'File too large (max 5MB)'}), 413

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'message': 'Token is missing!'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'message': 'Invalid or expired token!'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'message': 'Invalid or expired token!'}), 401


def register_commands(app):
    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        create_tables()
        click.echo('Database tables created.')

    @app.cli.command('promote-admin')
    @click.argument('user_id')
    def promote_admin_command(user_id):
        """Grant the admin flag to an existing user."""
        from skillswap import storage
        from skillswap.errors import NotFound

        try:
            storage.update_user_profile(user_id, {'is_admin': True})
        except NotFound:
            raise click.ClickException(f"User {user_id} not found")
        click.echo(f"User {user_id} is now an admin.")
