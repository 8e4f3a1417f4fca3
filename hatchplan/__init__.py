from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

from hatchplan.config import Config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
login_manager.login_view = "auth.login"


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Species durations are loaded once and passed to the engine from here on
    from hatchplan.services import species
    species.init_app(app)

    # Register blueprints
    from hatchplan.routes.main import bp as main_bp
    from hatchplan.routes.runs import bp as runs_bp
    from hatchplan.routes.auth import bp as auth_bp
    from hatchplan.routes.settings import bp as settings_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(runs_bp, url_prefix="/runs")
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(settings_bp, url_prefix="/settings")

    # Make models known to SQLAlchemy and Flask-Migrate
    with app.app_context():
        from hatchplan.models import User, Run, Batch, Settings  # noqa: F401

    from hatchplan.utils import register_template_filters
    register_template_filters(app)

    # Start the reminder scheduler (reads schedule setting from DB)
    from hatchplan.services.scheduler import init_app as init_scheduler
    init_scheduler(app)

    return app
