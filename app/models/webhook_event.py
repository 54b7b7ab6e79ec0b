from app.extensions import db
from datetime import datetime


class WebhookEvent(db.Model):
    __tablename__ = 'webhook_events'

    """
    Raw payment-provider events, stored before dispatch for audit and replay.
    The provider's event id is the primary key, so redeliveries land on the
    same row.
    """

    event_id = db.Column(db.String(255), primary_key=True)
    type = db.Column(db.String(100), nullable=False, index=True)
    payload = db.Column(db.JSON, nullable=False)
    processed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)
