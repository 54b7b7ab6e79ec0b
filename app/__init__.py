import logging

from flask import Flask, jsonify
from flask_cors import CORS
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from app.config import Config
from app.errors import ApiError
from app.extensions import db, jwt, limiter, migrate
from app.security import is_token_stale
from app.tasks.celery_app import init_celery
from app.utils.responses import error_response

API_PREFIX = '/api/v1'


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))

    # Import models so SQLAlchemy and Flask-Migrate see every table
    from app import models  # noqa: F401

    # Register blueprints
    from app.api import health
    app.register_blueprint(health.bp, url_prefix=API_PREFIX)
    from app.api import auth
    app.register_blueprint(auth.bp, url_prefix=f'{API_PREFIX}/auth')
    from app.api import users
    app.register_blueprint(users.bp, url_prefix=f'{API_PREFIX}/users')
    from app.api import tenants
    app.register_blueprint(tenants.bp, url_prefix=f'{API_PREFIX}/tenants')
    from app.api import ai
    app.register_blueprint(ai.bp, url_prefix=f'{API_PREFIX}/ai')
    from app.api import billing
    app.register_blueprint(billing.bp, url_prefix=f'{API_PREFIX}/billing')
    from app.api import dashboard
    app.register_blueprint(dashboard.bp, url_prefix=f'{API_PREFIX}/dashboard')
    from app.api import webhooks
    app.register_blueprint(webhooks.bp, url_prefix=f'{API_PREFIX}/webhooks')

    register_error_handlers(app)

    init_celery(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.code, err.message)
        return error_response(err.to_dict(), err.status_code)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err):
        return error_response({
            "code": "VALIDATION_ERROR",
            "message": "Validation failed",
            "details": err.messages,
        }, 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return error_response({
            "code": err.name.upper().replace(' ', '_'),
            "message": err.description,
        }, err.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", err)
        return error_response({
            "code": "INTERNAL_SERVER_ERROR",
            "message": "Internal server error",
        }, 500)

    # JWT error handlers for clearer responses
    @jwt.unauthorized_loader
    def jwt_missing_token(err):
        return jsonify({"success": False, "error": {"code": "UNAUTHORIZED", "message": err}}), 401

    @jwt.invalid_token_loader
    def jwt_invalid_token(err):
        return jsonify({"success": False, "error": {"code": "UNAUTHORIZED", "message": f"Invalid token: {err}"}}), 401

    @jwt.expired_token_loader
    def jwt_expired_token(header, payload):
        return jsonify({"success": False, "error": {"code": "UNAUTHORIZED", "message": "Token expired"}}), 401

    # Deactivated accounts and changed roles invalidate outstanding access tokens
    jwt.token_in_blocklist_loader(is_token_stale)

    @jwt.revoked_token_loader
    def jwt_revoked_token(header, payload):
        return jsonify({"success": False, "error": {"code": "UNAUTHORIZED", "message": "Token is no longer valid"}}), 401
