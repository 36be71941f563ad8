import logging
import os

from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from classes.errors import AnalyticsError
from config import config_dict
from models import db
from routes.admin import admin_bp
from routes.auth import auth_bp
from routes.dean import dean_bp
from routes.hod import hod_bp
from routes.teacher import teacher_bp
from utils.cache import cache

logger = logging.getLogger(__name__)

migrate = Migrate()


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)


def register_error_handlers(app):
    @app.errorhandler(AnalyticsError)
    def handle_analytics_error(error):
        if error.status_code >= 500:
            logger.error("Analytics failure: %s", error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception("Unhandled error")
        body = {"message": "Internal server error"}
        if app.config.get("EXPOSE_ERROR_DETAILS"):
            body["error"] = str(error)
        return jsonify(body), 500


def create_app(config_name=None):
    config_name = config_name or os.environ.get("FLASK_ENV", "production")

    app = Flask(__name__)
    app.config.from_object(config_dict.get(config_name.lower(), config_dict["production"]))
    configure_logging(app)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}, supports_credentials=True)

    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)

    @app.route('/')
    def home():
        return "LMS analytics service"

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(hod_bp, url_prefix='/api/hod')
    app.register_blueprint(dean_bp, url_prefix='/api/dean')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(teacher_bp, url_prefix='/api/teacher')

    register_error_handlers(app)

    logger.info("App created with %s config (cache: %s)", config_name, app.config["CACHE_TYPE"])
    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'])
