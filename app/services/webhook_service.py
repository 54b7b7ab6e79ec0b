"""
Webhook Service - verifies and dispatches Stripe webhook events.

Flow:
1. Verify the Stripe-Signature header over the raw body
2. Store the event (keyed by Stripe's event id) before doing anything else
3. Dispatch to the billing handlers
4. Mark processed

A handler exception propagates so the endpoint answers 500 and Stripe
redelivers. Redeliveries of an already processed event are skipped.
"""
import json
import logging
from datetime import datetime

import stripe
from flask import current_app

from app.errors import BadRequest, ServiceNotConfigured
from app.extensions import db
from app.models.webhook_event import WebhookEvent
from app.services import billing_service

logger = logging.getLogger(__name__)


def handle_payment_succeeded(invoice):
    logger.info("Payment succeeded", extra={"customer_id": invoice.get('customer'), "invoice_id": invoice.get('id')})


def handle_payment_failed(invoice):
    logger.warning("Payment failed", extra={"customer_id": invoice.get('customer'), "invoice_id": invoice.get('id')})


EVENT_HANDLERS = {
    'customer.subscription.created': billing_service.handle_subscription_created,
    'customer.subscription.updated': billing_service.handle_subscription_updated,
    'customer.subscription.deleted': billing_service.handle_subscription_deleted,
    'invoice.payment_succeeded': handle_payment_succeeded,
    'invoice.payment_failed': handle_payment_failed,
}


def verify_event(payload, signature):
    """Check the signature and return the event as a plain dict."""
    webhook_secret = current_app.config.get('STRIPE_WEBHOOK_SECRET')
    if not webhook_secret:
        logger.error("Stripe webhook secret not configured")
        raise ServiceNotConfigured("Webhook secret not configured")

    try:
        stripe.Webhook.construct_event(payload, signature, webhook_secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("Webhook signature verification failed", extra={"error": str(e)})
        raise BadRequest("Invalid signature")

    return json.loads(payload)


def _store_event(event):
    stored = db.session.get(WebhookEvent, event['id'])
    if stored is None:
        stored = WebhookEvent(event_id=event['id'], type=event['type'], payload=event)
        db.session.add(stored)
        db.session.commit()
    return stored


def handle_stripe_webhook(payload, signature):
    """
    Args:
        payload: raw request body (bytes), exactly as Stripe sent it
        signature: value of the Stripe-Signature header
    Returns:
        The stored WebhookEvent
    """
    event = verify_event(payload, signature)
    event_type = event.get('type')

    stored = _store_event(event)
    if stored.processed:
        logger.info("Webhook event already processed, skipping", extra={"event_id": stored.event_id})
        return stored

    logger.info("Processing webhook event", extra={"event_id": stored.event_id, "event_type": event_type})

    handler = EVENT_HANDLERS.get(event_type)
    try:
        if handler:
            handler(event['data']['object'])
        else:
            logger.info("Unhandled webhook event type", extra={"event_type": event_type})
    except Exception:
        db.session.rollback()
        logger.exception("Error processing webhook", extra={"event_id": stored.event_id, "event_type": event_type})
        raise

    stored.processed = True
    stored.processed_at = datetime.utcnow()
    db.session.commit()
    return stored
