from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required

from app.security import get_auth_context
from app.services import dashboard_service
from app.utils.responses import success_response

bp = Blueprint('dashboard', __name__)


@bp.route('/stats', methods=['GET'])
@jwt_required()
def get_dashboard_stats():
    """
    Dashboard Statistics Endpoint

    Returns aggregated statistics for the current tenant:
    - Credits used / remaining this month
    - API requests this month
    - Average model response time this month
    - Top AI services this month (count and share)
    - Usage per day over the last 30 days

    Requires JWT authentication and filters by tenant_id.
    """
    ctx = get_auth_context()

    current_app.logger.debug(
        "Dashboard: Fetching stats for tenant_id=%s",
        ctx.tenant_id
    )

    stats = dashboard_service.get_dashboard_stats(ctx)

    current_app.logger.info(
        "Dashboard: Stats successfully retrieved for tenant_id=%s",
        ctx.tenant_id
    )

    return success_response(stats)


@bp.route('/analytics', methods=['GET'])
@jwt_required()
def get_analytics():
    """
    Month-over-month analytics: user stats, current and previous month usage
    and growth percentages.
    """
    ctx = get_auth_context()

    analytics = dashboard_service.get_analytics(ctx)

    current_app.logger.debug(
        "Dashboard: Analytics for tenant_id=%s: credits_growth=%s",
        ctx.tenant_id,
        analytics['growth']['credits_growth']
    )

    return success_response(analytics)
