from app.extensions import db
from datetime import datetime
import uuid


class Usage(db.Model):
    __tablename__ = 'usage'

    """
    Monthly usage counters per tenant.

    One row per (tenant_id, month), created on the first metered request of
    the month. Counters only grow; see tenant_service.increment_usage.
    """

    usage_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.tenant_id'), nullable=False)
    month = db.Column(db.String(7), nullable=False)  # YYYY-MM
    ai_credits_used = db.Column(db.Integer, nullable=False, default=0)
    api_requests_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'month', name='uq_usage_tenant_month'),
    )
