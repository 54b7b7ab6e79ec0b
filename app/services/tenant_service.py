"""
Tenant Service

Tenant lookups, admin updates, settings/plan changes and the monthly usage
counters that the AI gateway meters against.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from app.constants import DEFAULT_CREDITS_LIMIT, DEFAULT_RATE_LIMIT
from app.errors import BadRequest, Conflict, Forbidden, NotFound
from app.extensions import db
from app.models.tenant import Tenant
from app.models.usage import Usage

logger = logging.getLogger(__name__)


def current_month(now=None):
    """Usage bucket key, e.g. '2024-05'."""
    return (now or datetime.utcnow()).strftime('%Y-%m')


def find_by_id(tenant_id):
    return Tenant.query.filter_by(tenant_id=tenant_id).first()


def find_by_slug(slug):
    return Tenant.query.filter_by(slug=slug).first()


def get_tenant_or_404(tenant_id):
    tenant = find_by_id(tenant_id)
    if not tenant:
        raise NotFound("Tenant not found")
    return tenant


def get_current_tenant(ctx):
    return get_tenant_or_404(ctx.tenant_id)


def update_tenant(ctx, data):
    """
    Rename a tenant and/or change its slug. Admins only.

    A requested slug is normalized with generate_slug() and must not belong to
    another tenant.
    """
    # Local import: auth_service imports this module
    from app.services.auth_service import generate_slug

    if not ctx.is_admin:
        raise Forbidden("Only admins can update the tenant")

    tenant = get_tenant_or_404(ctx.tenant_id)

    if 'name' in data:
        tenant.name = data['name'].strip()

    if 'slug' in data:
        slug = generate_slug(data['slug'])
        if len(slug) < 2:
            raise BadRequest("Slug must contain at least 2 letters or digits", code='VALIDATION_ERROR')
        other = find_by_slug(slug)
        if other and other.tenant_id != tenant.tenant_id:
            raise Conflict("Slug is already taken")
        tenant.slug = slug

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Slug is already taken")

    logger.info("Tenant updated", extra={"tenant_id": tenant.tenant_id, "tenant_name": tenant.name})
    return tenant


def update_settings(tenant_id, settings):
    """Merge keys into the tenant's settings blob."""
    tenant = get_tenant_or_404(tenant_id)

    merged = dict(tenant.settings or {})
    merged.update(settings)
    # Reassign so SQLAlchemy notices the JSON change
    tenant.settings = merged
    db.session.commit()

    logger.info("Tenant settings updated", extra={"tenant_id": tenant_id, "settings": merged})
    return tenant


def update_plan(tenant_id, plan):
    tenant = get_tenant_or_404(tenant_id)
    tenant.plan = plan
    db.session.commit()

    logger.info("Tenant plan updated", extra={"tenant_id": tenant_id, "plan": plan})
    return tenant


def get_usage_row(tenant_id, month):
    return Usage.query.filter_by(tenant_id=tenant_id, month=month).first()


def get_tenant_usage(tenant_id):
    tenant = get_tenant_or_404(tenant_id)
    month = current_month()
    usage = get_usage_row(tenant_id, month)
    settings = tenant.settings or {}

    return {
        "current_month": month,
        "ai_credits_used": usage.ai_credits_used if usage else 0,
        "api_requests_count": usage.api_requests_count if usage else 0,
        "ai_credits_limit": settings.get('ai_credits_limit', DEFAULT_CREDITS_LIMIT),
        "api_rate_limit": settings.get('api_rate_limit', DEFAULT_RATE_LIMIT),
    }


def _increment_existing(tenant_id, month, ai_credits, api_requests):
    # Single UPDATE ... SET col = col + n, so concurrent writers never lose counts
    return Usage.query.filter_by(tenant_id=tenant_id, month=month).update(
        {
            Usage.ai_credits_used: Usage.ai_credits_used + ai_credits,
            Usage.api_requests_count: Usage.api_requests_count + api_requests,
            Usage.updated_at: datetime.utcnow(),
        },
        synchronize_session=False,
    )


def increment_usage(tenant_id, ai_credits=0, api_requests=0):
    """
    Add to this month's counters, creating the month row on first use.

    Commits the current session.
    """
    month = current_month()

    if _increment_existing(tenant_id, month, ai_credits, api_requests) == 0:
        db.session.add(Usage(
            tenant_id=tenant_id,
            month=month,
            ai_credits_used=ai_credits,
            api_requests_count=api_requests,
        ))
        try:
            db.session.commit()
            return
        except IntegrityError:
            # Another writer created the row first
            db.session.rollback()
            _increment_existing(tenant_id, month, ai_credits, api_requests)

    db.session.commit()
    logger.debug("Usage incremented", extra={
        "tenant_id": tenant_id,
        "month": month,
        "ai_credits": ai_credits,
        "api_requests": api_requests,
    })
