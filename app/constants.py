"""
Plans, roles, statuses and the per-service credit table.

Values are stored as plain strings in the database; these names exist so the
rest of the code never spells them out by hand.
"""

# User roles
ROLE_ADMIN = 'admin'
ROLE_USER = 'user'
USER_ROLES = (ROLE_ADMIN, ROLE_USER)

# Billing plans
PLAN_FREE = 'free'
PLAN_STARTER = 'starter'
PLAN_PRO = 'pro'
PLAN_ENTERPRISE = 'enterprise'
BILLING_PLANS = (PLAN_FREE, PLAN_STARTER, PLAN_PRO, PLAN_ENTERPRISE)

# Subscription statuses (mirror the payment provider's vocabulary)
SUBSCRIPTION_ACTIVE = 'active'
SUBSCRIPTION_CANCELED = 'canceled'
SUBSCRIPTION_INCOMPLETE = 'incomplete'
SUBSCRIPTION_INCOMPLETE_EXPIRED = 'incomplete_expired'
SUBSCRIPTION_PAST_DUE = 'past_due'
SUBSCRIPTION_TRIALING = 'trialing'
SUBSCRIPTION_UNPAID = 'unpaid'

# AI service types
AI_TEXT_SUMMARIZATION = 'text_summarization'
AI_DOCUMENT_QA = 'document_qa'
AI_TEXT_GENERATION = 'text_generation'
AI_SENTIMENT_ANALYSIS = 'sentiment_analysis'

AI_SERVICE_CREDITS = {
    AI_TEXT_SUMMARIZATION: 2,
    AI_DOCUMENT_QA: 3,
    AI_TEXT_GENERATION: 5,
    AI_SENTIMENT_ANALYSIS: 1,
}

# AI request lifecycle: pending -> processing -> completed | failed
AI_STATUS_PENDING = 'pending'
AI_STATUS_PROCESSING = 'processing'
AI_STATUS_COMPLETED = 'completed'
AI_STATUS_FAILED = 'failed'

SUMMARY_STYLES = ('bullet_points', 'paragraph', 'executive_summary')

PLAN_FEATURES = {
    PLAN_FREE: {
        "ai_credits_per_month": 100,
        "api_requests_per_minute": 10,
        "max_team_members": 1,
        "custom_branding": False,
        "priority_support": False,
        "advanced_analytics": False,
    },
    PLAN_STARTER: {
        "ai_credits_per_month": 1000,
        "api_requests_per_minute": 50,
        "max_team_members": 5,
        "custom_branding": False,
        "priority_support": False,
        "advanced_analytics": True,
    },
    PLAN_PRO: {
        "ai_credits_per_month": 10000,
        "api_requests_per_minute": 200,
        "max_team_members": 25,
        "custom_branding": True,
        "priority_support": True,
        "advanced_analytics": True,
    },
    PLAN_ENTERPRISE: {
        "ai_credits_per_month": 100000,
        "api_requests_per_minute": 1000,
        "max_team_members": 100,
        "custom_branding": True,
        "priority_support": True,
        "advanced_analytics": True,
    },
}

# Settings every tenant starts with (matches the free plan)
DEFAULT_CREDITS_LIMIT = PLAN_FEATURES[PLAN_FREE]["ai_credits_per_month"]
DEFAULT_RATE_LIMIT = PLAN_FEATURES[PLAN_FREE]["api_requests_per_minute"]


def plan_limits(plan):
    """Tenant settings keys derived from a plan's feature table."""
    features = PLAN_FEATURES[plan]
    return {
        "ai_credits_limit": features["ai_credits_per_month"],
        "api_rate_limit": features["api_requests_per_minute"],
    }
