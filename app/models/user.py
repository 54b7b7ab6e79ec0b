from app.extensions import db
from app.constants import ROLE_USER
from datetime import datetime
import uuid

class User(db.Model):
    __tablename__ = 'users'

    """
    User Model - Represents individual users within a tenant.

    Users belong to exactly one tenant and can only access that tenant's data.
    Email is unique across the entire system, so login needs no tenant hint.

    Attributes:
        user_id (str): Unique identifier (UUID)
        tenant_id (str): Which organization this user belongs to
        email (str): User's email (unique across entire system)
        password_hash (str): Werkzeug password hash (never store plaintext!)
        name (str): Full name
        avatar (str): Optional avatar URL
        role (str): 'admin' or 'user'
        is_active (bool): Can user login? (soft delete)
    """

    user_id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.tenant_id'), nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    avatar = db.Column(db.String(500))
    role = db.Column(db.String(50), nullable=False, default=ROLE_USER)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
