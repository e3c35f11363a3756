# File: backend/campus_attendance/__init__.py
"""QR Attendance - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'QR Attendance',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from campus_attendance.api.auth import auth_bp
    from campus_attendance.api.sessions import sessions_bp
    from campus_attendance.api.attend import attend_bp
    from campus_attendance.api.scan import scan_bp
    from campus_attendance.api.functions import functions_bp

    # Auth
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    # Lecturer-facing QR presentation
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')

    # Student-facing marking
    app.register_blueprint(attend_bp, url_prefix='/attend')
    app.register_blueprint(scan_bp, url_prefix='/api/scan')

    # Mark-attendance function
    app.register_blueprint(functions_bp, url_prefix='/api/functions')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from campus_attendance.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(400)
    def bad_request(error):
        return handle_error(error, 400)

    @app.errorhandler(401)
    def unauthorized(error):
        return handle_error(error, 401)

    @app.errorhandler(403)
    def forbidden(error):
        return handle_error(error, 403)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error(error, 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/app.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Service modules log through their own loggers
        logging.getLogger('campus_attendance').addHandler(file_handler)
        logging.getLogger('campus_attendance').setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('QR Attendance startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from campus_attendance.models import (
            User, UserRole, Course, Section, SectionEnrollment,
            AttendanceSession, AttendanceRecord
        )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command()
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

        # Create admin
        from campus_attendance.models.user import User, UserRole

        admin = User.query.filter_by(email='admin@university.edu').first()
        if not admin:
            admin = User(
                email='admin@university.edu',
                full_name='System Administrator',
                role=UserRole.ADMIN
            )
            admin.set_password('admin123456')
            db.session.add(admin)
            db.session.commit()
            click.echo('Created admin user: admin@university.edu / admin123456')

    @app.cli.command()
    def seed_db():
        """Seed database with demo data."""
        from campus_attendance.services.seed_service import SeedService

        try:
            SeedService.seed_all()
            click.echo('Database seeded successfully!')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error seeding database: {str(e)}')
