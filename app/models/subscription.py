from app.extensions import db
from app.constants import PLAN_FREE, SUBSCRIPTION_ACTIVE
from datetime import datetime
import uuid


class Subscription(db.Model):
    __tablename__ = 'subscriptions'

    """
    Subscription Model - one row per tenant, mirrored from Stripe.

    Created with the tenant on registration (free plan). After that it is only
    mutated by webhook handlers and by attaching a Stripe customer at checkout.

    Attributes:
        stripe_customer_id (str): Stripe customer (cus_...), set lazily
        stripe_subscription_id (str): Stripe subscription (sub_...), set by webhooks
        plan (str): Billing plan
        status (str): One of Stripe's subscription statuses
        current_period_start / current_period_end (datetime): Billing period
        cancel_at_period_end (bool): Cancels when the period ends
    """

    subscription_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.tenant_id'), unique=True, nullable=False)
    stripe_customer_id = db.Column(db.String(255), nullable=True)
    stripe_subscription_id = db.Column(db.String(255), unique=True, nullable=True)
    plan = db.Column(db.String(50), nullable=False, default=PLAN_FREE)
    status = db.Column(db.String(50), nullable=False, default=SUBSCRIPTION_ACTIVE)
    current_period_start = db.Column(db.DateTime, nullable=True)
    current_period_end = db.Column(db.DateTime, nullable=True)
    cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "subscription_id": self.subscription_id,
            "tenant_id": self.tenant_id,
            "plan": self.plan,
            "status": self.status,
            "current_period_start": self.current_period_start.isoformat() if self.current_period_start else None,
            "current_period_end": self.current_period_end.isoformat() if self.current_period_end else None,
            "cancel_at_period_end": self.cancel_at_period_end,
        }
