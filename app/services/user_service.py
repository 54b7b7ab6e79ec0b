"""
User Service

Tenant-scoped user listing, profile updates, deactivation and invitations.
Every operation takes the caller's AuthContext and only touches users of the
caller's own tenant.
"""
import logging

from sqlalchemy import func

from app.constants import ROLE_ADMIN, ROLE_USER
from app.errors import Conflict, Forbidden, NotFound, ServiceUnavailable
from app.extensions import db
from app.models.user import User
from app.services import tenant_service

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    'created_at': User.created_at,
    'name': User.name,
    'email': User.email,
    'role': User.role,
}

UPDATABLE_FIELDS = ('name', 'avatar', 'role')


def find_by_id(user_id):
    return User.query.filter_by(user_id=user_id).first()


def find_by_email(email):
    return User.query.filter_by(email=email).first()


def list_users(ctx, page=1, limit=10, sort_by='created_at', sort_order='desc'):
    column = SORTABLE_FIELDS.get(sort_by, User.created_at)
    order = column.asc() if sort_order == 'asc' else column.desc()

    query = User.query.filter_by(tenant_id=ctx.tenant_id)
    total = query.count()
    users = query.order_by(order).offset((page - 1) * limit).limit(limit).all()

    return {"users": users, "total": total}


def _get_tenant_user(ctx, user_id, action):
    user = find_by_id(user_id)
    if not user:
        raise NotFound("User not found")

    if user.tenant_id != ctx.tenant_id:
        raise Forbidden(f"Cannot {action} user from different tenant")

    return user


def update_user(ctx, user_id, data):
    """
    Update name/avatar/role of a user in the caller's tenant.

    Only admins may change roles. Anything outside UPDATABLE_FIELDS
    (password in particular) is ignored.
    """
    user = _get_tenant_user(ctx, user_id, "update")

    if 'role' in data and not ctx.is_admin:
        raise Forbidden("Only admins can change user roles")

    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(user, field, data[field])

    db.session.commit()
    logger.info("User updated", extra={"user_id": user.user_id, "tenant_id": user.tenant_id})
    return user


def deactivate_user(ctx, user_id):
    if not ctx.is_admin:
        raise Forbidden("Only admins can deactivate users")

    user = _get_tenant_user(ctx, user_id, "deactivate")
    user.is_active = False
    db.session.commit()

    logger.info("User deactivated", extra={"user_id": user.user_id, "tenant_id": user.tenant_id})
    return user


def invite_user(ctx, email, role):
    """
    Queue an invitation e-mail for a new team member.

    The account itself is created when the invitee signs up.
    """
    # Local import keeps Celery out of the import path of the service layer
    from app.tasks.email_tasks import send_invitation_email_task

    if not ctx.is_admin:
        raise Forbidden("Only admins can invite users")

    if find_by_email(email):
        raise Conflict("User with this email already exists")

    tenant = tenant_service.get_tenant_or_404(ctx.tenant_id)
    inviter = find_by_id(ctx.user_id)

    try:
        task = send_invitation_email_task.delay(
            email=email,
            tenant_name=tenant.name,
            role=role,
            invited_by_name=inviter.name if inviter else ctx.email,
        )
    except Exception as e:
        logger.error("Could not queue invitation email", extra={"recipient": email, "error": str(e)})
        raise ServiceUnavailable("Invitation could not be queued, try again later")

    logger.info("User invitation queued", extra={
        "recipient": email,
        "tenant_id": ctx.tenant_id,
        "task_id": task.id,
    })
    return {"message": f"Invitation sent to {email}"}


def get_user_stats(tenant_id):
    base = db.session.query(func.count(User.user_id)).filter(User.tenant_id == tenant_id)

    return {
        "total_users": base.scalar(),
        "active_users": base.filter(User.is_active.is_(True)).scalar(),
        "admin_users": base.filter(User.role == ROLE_ADMIN).scalar(),
        "regular_users": base.filter(User.role == ROLE_USER).scalar(),
    }
