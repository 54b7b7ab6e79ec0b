from app.extensions import db
from app.constants import DEFAULT_CREDITS_LIMIT, DEFAULT_RATE_LIMIT, PLAN_FREE
from datetime import datetime
import uuid

class Tenant(db.Model):
    __tablename__ = 'tenants'

    """
    Tenant Model - Represents one customer organization using the SaaS.

    The tenant is the unit of billing and data partitioning: users, the
    subscription, usage counters and AI requests all hang off tenant_id.
    Tenants are never hard-deleted; deactivate with is_active=False.

    Attributes:
        tenant_id (str): Unique identifier (UUID)
        name (str): Organization name (e.g., "Acme Inc")
        slug (str): URL-safe name, unique across all tenants (e.g., "acme-inc")
        plan (str): Billing plan - 'free', 'starter', 'pro', 'enterprise'
        is_active (bool): Can members of this tenant log in?
        settings (dict): {ai_credits_limit, api_rate_limit, custom_branding?}
        created_at (datetime): When tenant was created
    """

    tenant_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(50), unique=True, nullable=False, index=True)
    plan = db.Column(db.String(50), nullable=False, default=PLAN_FREE)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    settings = db.Column(db.JSON, nullable=False, default=lambda: {
        "ai_credits_limit": DEFAULT_CREDITS_LIMIT,
        "api_rate_limit": DEFAULT_RATE_LIMIT,
    })
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    users = db.relationship('User', backref='tenant', lazy='dynamic')
    subscription = db.relationship('Subscription', backref='tenant', uselist=False)
