from app.extensions import db
from datetime import datetime
import uuid


class TeamMember(db.Model):
    __tablename__ = 'team_members'

    """
    Membership of a user in a tenant's team, with who invited them.
    The founding admin is recorded as having invited themselves.
    """

    member_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=False)
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.tenant_id'), nullable=False, index=True)
    role = db.Column(db.String(50), nullable=False)
    invited_by = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=True)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_active_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'tenant_id', name='uq_team_member_user_tenant'),
    )
