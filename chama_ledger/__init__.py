import logging
import os
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from chama_ledger.extensions import db, login_manager
from config import Config

logger = logging.getLogger(__name__)


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger('chama_ledger').setLevel(level)


def ensure_sqlite_dir(app):
    uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if uri.startswith('sqlite:///') and ':memory:' not in uri:
        os.makedirs(os.path.dirname(uri[len('sqlite:///'):]) or '.', exist_ok=True)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)
    ensure_sqlite_dir(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # User loader for Flask-Login
    from chama_ledger.models import Member

    @login_manager.user_loader
    def load_user(member_id):
        return db.session.get(Member, int(member_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Please log in to continue.'}), 401

    # Data source (database or bundled fixtures)
    from chama_ledger.data_sources import init_data_source, DataSourceError
    init_data_source(app)

    @app.errorhandler(DataSourceError)
    def data_source_unavailable(e):
        return jsonify({'error': str(e), 'banner': True}), 503

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'error': e.description}), e.code

    # Register blueprints
    from chama_ledger.routes.auth import auth_bp
    from chama_ledger.routes.dashboard import dashboard_bp
    from chama_ledger.routes.payouts import payouts_bp
    from chama_ledger.routes.welfare import welfare_bp
    from chama_ledger.routes.projects import projects_bp
    from chama_ledger.routes.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(payouts_bp)
    app.register_blueprint(welfare_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(admin_bp)

    # CLI commands
    from chama_ledger.cli import register_commands
    register_commands(app)

    with app.app_context():
        db.create_all()
        logger.debug("Database tables ready")

    return app
