"""
Auth Service

Registration, login and token refresh.

Registration creates the whole workspace in one transaction:
    Tenant (free plan) -> admin User -> TeamMember -> free Subscription
If any insert fails, nothing is written.

Tokens (Flask-JWT-Extended):
    access token  - sub=user_id plus tenant_id, email, role claims (24h)
    refresh token - sub=user_id only (7d by default)
"""
import logging
import re
from datetime import datetime, timedelta

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from app.constants import (
    DEFAULT_CREDITS_LIMIT,
    DEFAULT_RATE_LIMIT,
    PLAN_FREE,
    ROLE_ADMIN,
    SUBSCRIPTION_ACTIVE,
)
from app.errors import Conflict, Unauthorized
from app.extensions import db
from app.models.subscription import Subscription
from app.models.team_member import TeamMember
from app.models.tenant import Tenant
from app.models.user import User
from app.schemas.auth_schema import TenantResponseSchema, UserResponseSchema
from app.security import build_claims
from app.services import tenant_service

logger = logging.getLogger(__name__)

user_schema = UserResponseSchema()
tenant_schema = TenantResponseSchema()

SLUG_MAX_LENGTH = 50
TRIAL_PERIOD_DAYS = 30


def generate_slug(name):
    """
    URL-safe slug from a display name.

    "Acme Inc"     -> "acme-inc"
    "Acme  Inc!!"  -> "acme-inc"
    """
    slug = name.lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = slug.strip()
    slug = re.sub(r'[\s-]+', '-', slug)
    return slug[:SLUG_MAX_LENGTH]


def validate_credentials(email, password):
    """Return the user for a matching email/password pair, otherwise None."""
    user = User.query.filter_by(email=email).first()
    if not user:
        return None

    if not check_password_hash(user.password_hash, password):
        return None

    return user


def issue_access_token(user):
    return create_access_token(identity=user.user_id, additional_claims=build_claims(user))


def _auth_response(user, tenant):
    return {
        "user": user_schema.dump(user),
        "tenant": tenant_schema.dump(tenant),
        "access_token": issue_access_token(user),
        "refresh_token": create_refresh_token(identity=user.user_id),
    }


def login(email, password):
    user = validate_credentials(email, password)
    if not user:
        logger.info("Login failed", extra={"email": email})
        raise Unauthorized("Invalid credentials")

    if not user.is_active:
        raise Unauthorized("Account is deactivated")

    tenant = tenant_service.find_by_id(user.tenant_id)
    if not tenant or not tenant.is_active:
        raise Unauthorized("Tenant is deactivated")

    logger.info("User logged in", extra={"user_id": user.user_id, "tenant_id": tenant.tenant_id})
    return _auth_response(user, tenant)


def register(email, password, name, tenant_name):
    """
    Create a tenant, its first (admin) user, the team membership and a free
    subscription, then log the user in.

    Raises:
        Conflict: email already registered, slug taken, or the insert failed
    """
    if User.query.filter_by(email=email).first():
        raise Conflict("User with this email already exists")

    slug = generate_slug(tenant_name)
    if tenant_service.find_by_slug(slug):
        raise Conflict("Organization name is already taken")

    password_hash = generate_password_hash(password)
    now = datetime.utcnow()

    try:
        # Step 1: Create tenant and flush to generate tenant_id
        tenant = Tenant(
            name=tenant_name.strip(),
            slug=slug,
            plan=PLAN_FREE,
            settings={
                "ai_credits_limit": DEFAULT_CREDITS_LIMIT,
                "api_rate_limit": DEFAULT_RATE_LIMIT,
            },
        )
        db.session.add(tenant)
        db.session.flush()

        # Step 2: First user is always the admin
        user = User(
            email=email,
            password_hash=password_hash,
            name=name.strip(),
            tenant_id=tenant.tenant_id,
            role=ROLE_ADMIN,
            is_active=True,
        )
        db.session.add(user)
        db.session.flush()

        # Step 3: Team membership, invited by themselves
        db.session.add(TeamMember(
            user_id=user.user_id,
            tenant_id=tenant.tenant_id,
            role=ROLE_ADMIN,
            invited_by=user.user_id,
            joined_at=now,
        ))

        # Step 4: Free subscription for the first billing period
        db.session.add(Subscription(
            tenant_id=tenant.tenant_id,
            plan=PLAN_FREE,
            status=SUBSCRIPTION_ACTIVE,
            current_period_start=now,
            current_period_end=now + timedelta(days=TRIAL_PERIOD_DAYS),
        ))

        db.session.commit()
    except IntegrityError:
        # Concurrent registration with the same email or slug
        db.session.rollback()
        logger.warning("Registration conflict", extra={"email": email, "slug": slug})
        raise Conflict("Registration failed")
    except Exception:
        db.session.rollback()
        logger.exception("Error during registration", extra={"email": email})
        raise Conflict("Registration failed")

    logger.info("New user registered", extra={
        "user_id": user.user_id,
        "tenant_id": tenant.tenant_id,
        "email": user.email,
    })
    return _auth_response(user, tenant)


def refresh_access_token(refresh_token):
    try:
        payload = decode_token(refresh_token)
    except (PyJWTError, JWTExtendedException) as e:
        logger.info("Refresh token rejected", extra={"error": str(e)})
        raise Unauthorized("Invalid refresh token")

    if payload.get('type') != 'refresh':
        raise Unauthorized("Invalid refresh token")

    user = User.query.filter_by(user_id=payload.get('sub')).first()
    if not user:
        raise Unauthorized("Invalid refresh token")
    if not user.is_active:
        raise Unauthorized("Account is deactivated")

    return {"access_token": issue_access_token(user)}
