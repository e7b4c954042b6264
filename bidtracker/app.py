import os
import logging
import click
from flask import Flask, request, jsonify, send_from_directory, abort, current_app
from flask_login import LoginManager, login_required
from flask_cors import CORS
from sqlalchemy import text

from bidtracker.config import config, get_config_name
from bidtracker.models import db, User
from bidtracker.routes import BLUEPRINTS
from bidtracker.services.bid_board import BidBoard
from bidtracker.services.data_service import DataService, JOBS, ESTIMATORS
from bidtracker.services.date_utils import set_server_timezone
from bidtracker.services.sample_data import sample_jobs, sample_estimators
from bidtracker.services.storage import AttachmentStorage

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


def configure_logging(app):
    """Route app and package loggers through one handler at LOG_LEVEL"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if app.debug:
        level = logging.DEBUG

    package_logger = logging.getLogger('bidtracker')
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    app.logger.setLevel(level)


def create_app(config_name=None):
    """
    Application factory: config, database, auth, the data service and
    bid board, attachment storage and the API blueprints
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)
    app.config.from_object(config[config_name]())
    configure_logging(app)
    app.logger.info(f"✓ Configuration loaded for {config_name} environment")

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError as e:
        app.logger.warning(f"Could not create instance folder: {e}")

    db.init_app(app)
    set_server_timezone(app.config.get('TIMEZONE', 'America/Los_Angeles'))

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'Accept', 'Origin'],
         expose_headers=['Content-Type', 'Content-Disposition'],
         max_age=86400)

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'strong'

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """Return JSON instead of redirecting to a login page"""
        app.logger.warning(f"Unauthorized access attempt to {request.path} from {request.remote_addr}")
        return jsonify({
            'error': 'Authentication required',
            'message': 'You must be logged in to access this endpoint',
            'code': 'UNAUTHORIZED'
        }), 401

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError) as e:
            app.logger.warning(f"Invalid user_id provided to user_loader: {user_id} - {e}")
            return None

    # Services shared by the blueprints
    data_service = DataService.from_config(app.config)
    app.extensions['data_service'] = data_service
    app.extensions['bid_board'] = BidBoard(
        data_service,
        max_age_seconds=app.config.get('BOARD_MAX_AGE_SECONDS', 30),
        statuses=app.config.get('JOB_STATUSES'),
    )
    app.extensions['attachment_storage'] = AttachmentStorage.from_config(app.config, app.instance_path)
    app.logger.info(f"✓ Job data served from {data_service.backend_name} storage (mode: {data_service.mode})")

    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)
    app.logger.info(f"✓ Registered {len(BLUEPRINTS)} blueprints")

    @app.route('/uploads/<path:filename>')
    @login_required
    def uploaded_file(filename):
        """Serve attachments kept in the local upload folder"""
        storage = current_app.extensions['attachment_storage']
        if storage.local_path(filename) is None:
            abort(404)
        return send_from_directory(os.path.abspath(storage.upload_folder), filename)

    @app.route('/')
    def index():
        return jsonify({
            'message': f"{app.config.get('COMPANY_NAME', 'Bid Tracker')} API",
            'status': 'running',
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'auth': '/api/auth',
                'jobs': '/api/jobs',
                'estimators': '/api/estimators',
                'dashboard': '/api/dashboard',
                'export': '/api/export',
            }
        })

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': f'The requested endpoint {request.path} does not exist',
            'code': 'NOT_FOUND'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED'
        }), 405

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({
            'error': 'File too large',
            'message': f"Uploads are limited to {app.config.get('MAX_CONTENT_LENGTH', 0) // (1024 * 1024)} MB",
            'code': 'PAYLOAD_TOO_LARGE'
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        """500 handler with database rollback"""
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR'
        }), 500

    @app.cli.command('seed-sample')
    def seed_sample():
        """Load the sample estimators and jobs into the local database."""
        local = data_service.local
        added = 0
        for table, records in ((ESTIMATORS, sample_estimators()), (JOBS, sample_jobs())):
            for record in records:
                if local.get(table, record['id']) is None:
                    local.insert(table, record)
                    added += 1
        click.echo(f"Seeded {added} sample records")

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            db.create_all()
            app.logger.info("✓ Database tables created/verified successfully")
        except Exception as db_error:
            app.logger.error(f"❌ Database initialization error: {db_error}")
            if config_name != 'production':
                raise

    app.logger.info(f"✓ Bid Tracker API created ({len(list(app.url_map.iter_rules()))} routes)")
    return app
