"""
Flask extensions, created unbound here and bound to the app in create_app().

Usage: from app.extensions import db, jwt, limiter
"""
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

# Tenants, users, usage counters, AI requests, webhook events
db = SQLAlchemy()

# Access and refresh tokens; access tokens carry tenant_id/email/role claims
jwt = JWTManager()

# `flask db` commands
migrate = Migrate()

# Per-client request throttling; storage comes from RATELIMIT_STORAGE_URI
limiter = Limiter(key_func=get_remote_address)
