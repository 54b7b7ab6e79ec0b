from app.extensions import db
from app.constants import AI_STATUS_PENDING
from datetime import datetime
import uuid
import json

class AiRequest(db.Model):
    __tablename__ = 'ai_requests'

    """
    AiRequest Model - audit row for every call made to the language model.

    The row is written in 'processing' before the model is called and updated
    exactly once afterwards, to 'completed' or 'failed'. Failed rows keep the
    error message and carry no credits.

    Attributes:
        request_id (str): Unique identifier (UUID)
        tenant_id (str): Tenant that was metered
        user_id (str): User who made the request
        request_type (str): 'text_summarization', 'document_qa', ...
        input (text): JSON-encoded request payload
        output (text): Model output (completed only)
        status (str): 'pending', 'processing', 'completed', 'failed'
        credits_used (int): Credits charged for this request
        processing_time_ms (int): Wall-clock time spent in the model call
        error_message (text): Failure reason (failed only)
    """

    request_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.tenant_id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=False)
    request_type = db.Column('type', db.String(50), nullable=False)
    input = db.Column(db.Text, nullable=False)
    output = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(50), nullable=False, default=AI_STATUS_PENDING)
    credits_used = db.Column(db.Integer, nullable=False, default=0)
    processing_time_ms = db.Column(db.Integer, nullable=True)
    error_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User')

    def to_dict(self):
        """Convert request to dictionary for API response."""
        try:
            input_data = json.loads(self.input) if self.input else None
        except (json.JSONDecodeError, TypeError):
            input_data = self.input

        return {
            "request_id": self.request_id,
            "tenant_id": self.tenant_id,
            "type": self.request_type,
            "input": input_data,
            "output": self.output,
            "status": self.status,
            "credits_used": self.credits_used,
            "processing_time_ms": self.processing_time_ms,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "user": {
                "user_id": self.user.user_id,
                "name": self.user.name,
                "email": self.user.email,
            } if self.user else None,
        }
