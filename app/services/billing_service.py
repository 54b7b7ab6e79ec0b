"""
Billing Service - Stripe customers, checkout/portal sessions and the
subscription reconciliation driven by Stripe webhooks.

Local Subscription rows mirror Stripe. Apart from attaching a customer id at
checkout, they only change when a webhook handler below runs.
"""
import logging
from datetime import datetime

import stripe
from flask import current_app

from app.constants import (
    BILLING_PLANS,
    PLAN_FEATURES,
    PLAN_FREE,
    SUBSCRIPTION_ACTIVE,
    SUBSCRIPTION_CANCELED,
    SUBSCRIPTION_INCOMPLETE,
    SUBSCRIPTION_INCOMPLETE_EXPIRED,
    SUBSCRIPTION_PAST_DUE,
    SUBSCRIPTION_TRIALING,
    SUBSCRIPTION_UNPAID,
    plan_limits,
)
from app.errors import BadRequest, ServiceNotConfigured
from app.extensions import db
from app.models.subscription import Subscription
from app.services import tenant_service

logger = logging.getLogger(__name__)

STRIPE_STATUS_MAP = {
    'active': SUBSCRIPTION_ACTIVE,
    'canceled': SUBSCRIPTION_CANCELED,
    'incomplete': SUBSCRIPTION_INCOMPLETE,
    'incomplete_expired': SUBSCRIPTION_INCOMPLETE_EXPIRED,
    'past_due': SUBSCRIPTION_PAST_DUE,
    'trialing': SUBSCRIPTION_TRIALING,
    'unpaid': SUBSCRIPTION_UNPAID,
}


def _get_stripe():
    """Return the stripe module with the API key applied."""
    secret_key = current_app.config.get('STRIPE_SECRET_KEY')
    if not secret_key:
        raise ServiceNotConfigured("Stripe is not configured. Set STRIPE_SECRET_KEY in environment.")
    stripe.api_key = secret_key
    return stripe


def map_stripe_status(status):
    mapped = STRIPE_STATUS_MAP.get(status)
    if mapped is None:
        logger.warning("Unknown Stripe subscription status, treating as active", extra={"stripe_status": status})
        return SUBSCRIPTION_ACTIVE
    return mapped


def _from_timestamp(value):
    return datetime.utcfromtimestamp(value) if value else None


def _period_bounds(stripe_subscription):
    """
    (start, end) of the current billing period.

    Newer Stripe API versions report the period on the subscription items
    rather than on the subscription itself.
    """
    start = stripe_subscription.get('current_period_start')
    end = stripe_subscription.get('current_period_end')
    if start is None or end is None:
        items = (stripe_subscription.get('items') or {}).get('data') or []
        if items:
            start = items[0].get('current_period_start')
            end = items[0].get('current_period_end')
    return _from_timestamp(start), _from_timestamp(end)


def get_subscription(tenant_id):
    return Subscription.query.filter_by(tenant_id=tenant_id).first()


def create_customer(tenant_id, email, name):
    """
    Stripe customer id for the tenant, creating the customer once.

    The idempotency key makes concurrent first calls resolve to the same
    Stripe customer.
    """
    subscription = get_subscription(tenant_id)
    if subscription and subscription.stripe_customer_id:
        return subscription.stripe_customer_id

    client = _get_stripe()
    try:
        customer = client.Customer.create(
            email=email,
            name=name,
            metadata={"tenant_id": tenant_id},
            idempotency_key=f"customer-{tenant_id}",
        )
    except stripe.StripeError as e:
        logger.error("Error creating Stripe customer", extra={"tenant_id": tenant_id, "error": str(e)})
        raise BadRequest("Failed to create customer", code='STRIPE_ERROR')

    if subscription:
        subscription.stripe_customer_id = customer['id']
        db.session.commit()

    logger.info("Stripe customer created", extra={"tenant_id": tenant_id, "customer_id": customer['id']})
    return customer['id']


def create_checkout_session(tenant_id, plan, success_url, cancel_url):
    if plan == PLAN_FREE:
        raise BadRequest("Cannot create checkout session for free plan")

    subscription = get_subscription(tenant_id)
    if not subscription:
        raise BadRequest("Subscription not found")

    customer_id = subscription.stripe_customer_id
    if not customer_id:
        tenant = subscription.tenant
        customer_id = create_customer(tenant_id, f"admin@{tenant.slug}.com", tenant.name)

    client = _get_stripe()
    metadata = {"tenant_id": tenant_id, "plan": plan}
    try:
        session = client.checkout.Session.create(
            customer=customer_id,
            payment_method_types=['card'],
            line_items=[{
                "price": current_app.config['STRIPE_PRICE_IDS'][plan],
                "quantity": 1,
            }],
            mode='subscription',
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            # Copied onto the subscription so webhook handlers can find the tenant
            subscription_data={"metadata": metadata},
        )
    except stripe.StripeError as e:
        logger.error("Error creating checkout session", extra={"tenant_id": tenant_id, "error": str(e)})
        raise BadRequest("Failed to create checkout session", code='STRIPE_ERROR')

    logger.info("Checkout session created", extra={"tenant_id": tenant_id, "session_id": session['id'], "plan": plan})
    return {"checkout_url": session['url']}


def create_portal_session(tenant_id, return_url):
    subscription = get_subscription(tenant_id)
    if not subscription or not subscription.stripe_customer_id:
        raise BadRequest("Customer not found")

    client = _get_stripe()
    try:
        session = client.billing_portal.Session.create(
            customer=subscription.stripe_customer_id,
            return_url=return_url,
        )
    except stripe.StripeError as e:
        logger.error("Error creating portal session", extra={"tenant_id": tenant_id, "error": str(e)})
        raise BadRequest("Failed to create portal session", code='STRIPE_ERROR')

    return {"portal_url": session['url']}


def _apply_plan(tenant_id, plan):
    tenant_service.update_plan(tenant_id, plan)
    tenant_service.update_settings(tenant_id, plan_limits(plan))


def handle_subscription_created(stripe_subscription):
    metadata = stripe_subscription.get('metadata') or {}
    tenant_id = metadata.get('tenant_id')
    plan = metadata.get('plan')

    if not tenant_id or plan not in BILLING_PLANS:
        logger.error("Missing metadata in subscription", extra={
            "stripe_subscription_id": stripe_subscription.get('id'),
            "metadata": metadata,
        })
        return

    subscription = get_subscription(tenant_id)
    if not subscription:
        logger.error("No local subscription for tenant", extra={"tenant_id": tenant_id})
        return

    start, end = _period_bounds(stripe_subscription)
    subscription.stripe_subscription_id = stripe_subscription['id']
    subscription.plan = plan
    subscription.status = map_stripe_status(stripe_subscription.get('status'))
    subscription.current_period_start = start
    subscription.current_period_end = end
    subscription.cancel_at_period_end = bool(stripe_subscription.get('cancel_at_period_end'))
    db.session.commit()

    _apply_plan(tenant_id, plan)
    logger.info("Subscription created", extra={"tenant_id": tenant_id, "plan": plan})


def _find_by_stripe_id(stripe_subscription):
    subscription = Subscription.query.filter_by(
        stripe_subscription_id=stripe_subscription.get('id')
    ).first()
    if not subscription:
        logger.error("Subscription not found", extra={"stripe_subscription_id": stripe_subscription.get('id')})
    return subscription


def handle_subscription_updated(stripe_subscription):
    subscription = _find_by_stripe_id(stripe_subscription)
    if not subscription:
        return

    start, end = _period_bounds(stripe_subscription)
    subscription.status = map_stripe_status(stripe_subscription.get('status'))
    subscription.current_period_start = start
    subscription.current_period_end = end
    subscription.cancel_at_period_end = bool(stripe_subscription.get('cancel_at_period_end'))
    db.session.commit()

    logger.info("Subscription updated", extra={
        "subscription_id": subscription.subscription_id,
        "status": subscription.status,
    })


def handle_subscription_deleted(stripe_subscription):
    subscription = _find_by_stripe_id(stripe_subscription)
    if not subscription:
        return

    subscription.status = SUBSCRIPTION_CANCELED
    subscription.plan = PLAN_FREE
    db.session.commit()

    _apply_plan(subscription.tenant_id, PLAN_FREE)
    logger.info("Subscription deleted", extra={"subscription_id": subscription.subscription_id})


def get_subscription_details(tenant_id):
    subscription = get_subscription(tenant_id)
    if not subscription:
        raise BadRequest("Subscription not found")

    details = subscription.to_dict()
    return {
        "plan": details['plan'],
        "status": details['status'],
        "current_period_start": details['current_period_start'],
        "current_period_end": details['current_period_end'],
        "cancel_at_period_end": details['cancel_at_period_end'],
        "features": PLAN_FEATURES.get(subscription.plan),
        "usage": tenant_service.get_tenant_usage(tenant_id),
    }


def get_plans():
    """Public plan catalog."""
    return [
        {"plan": plan, "features": PLAN_FEATURES[plan]}
        for plan in BILLING_PLANS
    ]
