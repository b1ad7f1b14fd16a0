"""
Club Planner - Sports club facility booking
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask, g
from flask_wtf.csrf import CSRFError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db

from utils.api_response import api_error
from utils.messages import MESSAGES


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.planner import planner_bp

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(planner_bp, url_prefix='/api')

    @app.route('/')
    def index():
        """Service banner."""
        from utils.api_response import api_success
        return api_success(data={'app': app.config.get('APP_NAME', 'Club Planner')})


def register_error_handlers(app):
    """Register JSON error handlers."""

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(MESSAGES['not_found'], 404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error(str(error.description), 405)

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        """Handle missing or expired CSRF tokens."""
        return api_error(error.description, 400)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error(f'Unhandled error: {error}', exc_info=True)
        return api_error(MESSAGES['internal_error'], 500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('email')
    @click.option('--full-name', default=None, help='Name shown on the planner.')
    @click.option('--admin', is_flag=True, help='Create an admin instead of a coach.')
    @click.password_option()
    def create_user_command(username, email, full_name, admin, password):
        """Create a new coach (or admin) user."""
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(
                    username=username,
                    email=email,
                    password=password,
                    full_name=full_name,
                    role='admin' if admin else 'coach'
                )
            except sqlite3.IntegrityError as e:
                raise click.ClickException(f'Error creating user: {e}')
            click.echo(f'User created successfully! ID: {user_id}')

    @app.cli.command('assign-squad')
    @click.argument('username')
    @click.argument('squad')
    def assign_squad_command(username, squad):
        """Let a coach book for a squad."""
        from models.user import get_user_by_username
        from models.squad import get_squad_by_name, assign_squad_manager

        with app.app_context():
            user = get_user_by_username(username)
            if not user:
                raise click.ClickException(f'Unknown user: {username}')
            squad_row = get_squad_by_name(squad)
            if not squad_row:
                raise click.ClickException(f'Unknown squad: {squad}')

            if assign_squad_manager(squad_row['id'], user['id']):
                click.echo(f'{username} now manages {squad}')
            else:
                click.echo(f'{username} already manages {squad}')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/planner.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        # Booking core modules log through their own loggers
        logging.getLogger('models').addHandler(file_handler)
        logging.getLogger('models').setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Club Planner startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger('models').setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
