"""
Dashboard Service

Aggregates usage counters and AI request history into the numbers shown on
the tenant dashboard. Read-only.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import func

from app.extensions import db
from app.models.ai_request import AiRequest
from app.services import tenant_service, user_service

logger = logging.getLogger(__name__)

USAGE_HISTORY_DAYS = 30


def start_of_month(now=None):
    now = now or datetime.utcnow()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_key(months_ago=0, now=None):
    """'YYYY-MM' for the month `months_ago` months before now."""
    now = now or datetime.utcnow()
    total = now.year * 12 + (now.month - 1) - months_ago
    year, month = divmod(total, 12)
    return f"{year:04d}-{month + 1:02d}"


def get_top_ai_services(tenant_id):
    rows = (
        db.session.query(AiRequest.request_type, func.count(AiRequest.request_id))
        .filter(AiRequest.tenant_id == tenant_id, AiRequest.created_at >= start_of_month())
        .group_by(AiRequest.request_type)
        .order_by(func.count(AiRequest.request_id).desc())
        .all()
    )
    total = sum(count for _, count in rows)

    return [
        {
            "service": request_type,
            "count": count,
            "percentage": (count / total) * 100 if total > 0 else 0,
        }
        for request_type, count in rows
    ]


def get_average_response_time(tenant_id):
    average = (
        db.session.query(func.avg(AiRequest.processing_time_ms))
        .filter(
            AiRequest.tenant_id == tenant_id,
            AiRequest.processing_time_ms.isnot(None),
            AiRequest.created_at >= start_of_month(),
        )
        .scalar()
    )
    return float(average) if average is not None else 0


def get_usage_by_day(tenant_id, days=USAGE_HISTORY_DAYS):
    """One entry per day for the last `days` days, oldest first."""
    today = datetime.utcnow().date()
    dates = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    buckets = {day.isoformat(): {"credits_used": 0, "api_requests": 0} for day in dates}

    rows = (
        db.session.query(AiRequest.created_at, AiRequest.credits_used)
        .filter(
            AiRequest.tenant_id == tenant_id,
            AiRequest.created_at >= datetime.combine(dates[0], datetime.min.time()),
        )
        .all()
    )
    for created_at, credits_used in rows:
        bucket = buckets.get(created_at.date().isoformat())
        if bucket is None:
            continue
        bucket["credits_used"] += credits_used or 0
        bucket["api_requests"] += 1

    return [{"date": day, **values} for day, values in buckets.items()]


def get_dashboard_stats(ctx):
    usage = tenant_service.get_tenant_usage(ctx.tenant_id)

    stats = {
        "total_credits_used": usage['ai_credits_used'],
        "credits_remaining": usage['ai_credits_limit'] - usage['ai_credits_used'],
        "total_api_requests": usage['api_requests_count'],
        "average_response_time": get_average_response_time(ctx.tenant_id),
        "top_ai_services": get_top_ai_services(ctx.tenant_id),
        "usage_by_day": get_usage_by_day(ctx.tenant_id),
    }
    logger.debug("Dashboard stats computed", extra={"tenant_id": ctx.tenant_id})
    return stats


def get_monthly_usage(tenant_id, months_ago):
    month = month_key(months_ago)
    usage = tenant_service.get_usage_row(tenant_id, month)
    return {
        "month": month,
        "ai_credits_used": usage.ai_credits_used if usage else 0,
        "api_requests_count": usage.api_requests_count if usage else 0,
    }


def _growth(current, previous):
    if previous > 0:
        value = ((current - previous) / previous) * 100
    else:
        value = 100 if current > 0 else 0
    return round(value, 2)


def calculate_growth(current, previous):
    return {
        "credits_growth": _growth(current['ai_credits_used'], previous['ai_credits_used']),
        "requests_growth": _growth(current['api_requests_count'], previous['api_requests_count']),
    }


def get_analytics(ctx):
    current = get_monthly_usage(ctx.tenant_id, 0)
    previous = get_monthly_usage(ctx.tenant_id, 1)

    return {
        "user_stats": user_service.get_user_stats(ctx.tenant_id),
        "current_month_usage": current,
        "previous_month_usage": previous,
        "growth": calculate_growth(current, previous),
    }
