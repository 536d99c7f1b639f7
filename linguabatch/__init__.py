from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    from linguabatch.config import config_by_name

    app = Flask(__name__)

    # Config
    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    app.config.from_object(config_by_name.get(config_name, config_by_name['development']))

    # Initialize extensions
    db.init_app(app)
    CORS(app)

    # Create tables with error handling
    with app.app_context():
        from linguabatch import models  # noqa: F401  (register tables)
        try:
            db.create_all()
        except Exception as e:
            logger.warning(f"Could not create database tables: {e}")

    # Register routes
    from linguabatch.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app
