import logging
import os

from flask import Flask, jsonify
from .extensions import db, migrate, rq


def create_app(config_object='config.Config'):
    """App factory: extensions, models and the JSON API."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    level = app.config.get('LOG_LEVEL', 'INFO')
    app.logger.setLevel(level)
    logging.getLogger('speakbetter').setLevel(level)

    db.init_app(app)
    migrate.init_app(app, db, directory=app.config.get('MIGRATIONS_DIR', 'alembic'))
    rq.init_app(app)

    from . import models  # noqa: F401  register tables on db.metadata
    from .api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    if app.config.get('CREATE_ALL') and not os.environ.get('SKIP_CREATE_ALL'):
        with app.app_context():
            db.create_all()

    @app.get('/health')
    def health():
        return jsonify({'status': 'ok'})

    return app
