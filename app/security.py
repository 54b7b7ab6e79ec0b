"""
Request identity helpers.

Route handlers build an AuthContext from the verified access token and pass it
explicitly into services. Services never read JWT state themselves.

Usage:
    @bp.route('/current', methods=['PUT'])
    @jwt_required()
    @admin_required
    def update_current():
        ctx = get_auth_context()
        ...
"""
from dataclasses import dataclass
from functools import wraps

from flask_jwt_extended import get_jwt

from app.constants import ROLE_ADMIN
from app.errors import Forbidden, Unauthorized
from app.models.user import User


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    tenant_id: str
    role: str
    email: str

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN


def build_claims(user):
    """Extra claims carried by every access token."""
    return {
        "tenant_id": user.tenant_id,
        "email": user.email,
        "role": user.role,
    }


def is_token_stale(jwt_header, jwt_payload):
    """
    True when an access token no longer matches its account: the user is gone
    or deactivated, the tenant is deactivated, or the role changed since issue.

    Registered as the JWT blocklist check, so stale tokens get a 401.
    """
    if jwt_payload.get('type') != 'access':
        return False

    user = User.query.filter_by(user_id=jwt_payload.get('sub')).first()
    if not user or not user.is_active:
        return True
    if user.role != jwt_payload.get('role'):
        return True
    return not user.tenant.is_active


def get_auth_context():
    """Read the identity of the current request. Must run under @jwt_required()."""
    claims = get_jwt()
    tenant_id = claims.get('tenant_id')
    if not tenant_id:
        raise Unauthorized("Token is missing tenant information")

    return AuthContext(
        user_id=claims.get('sub'),
        tenant_id=tenant_id,
        role=claims.get('role'),
        email=claims.get('email'),
    )


def admin_required(fn):
    """Reject the request with 403 unless the caller is a tenant admin."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not get_auth_context().is_admin:
            raise Forbidden("Admin role required")
        return fn(*args, **kwargs)
    return wrapper
