from flask import Blueprint, request, current_app

from app.services import webhook_service
from app.utils.responses import success_response

bp = Blueprint('webhooks', __name__)


@bp.route('/stripe', methods=['POST'])
def stripe_webhook():
    """
    Stripe Webhook Endpoint (public)

    The signature is computed over the raw body, so the body is read
    unparsed. Returns 200 {"received": true} once the event is handled;
    any error makes Stripe redeliver.
    """
    payload = request.get_data()
    signature = request.headers.get('Stripe-Signature', '')

    event = webhook_service.handle_stripe_webhook(payload, signature)

    current_app.logger.info("Webhooks: handled event_id=%s type=%s", event.event_id, event.type)
    return success_response({"received": True})
