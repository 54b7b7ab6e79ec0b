from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from app.schemas.billing_schema import CheckoutSchema, PortalSchema
from app.security import admin_required, get_auth_context
from app.services import billing_service
from app.utils.responses import success_response

bp = Blueprint('billing', __name__)

checkout_schema = CheckoutSchema()
portal_schema = PortalSchema()


@bp.route('/subscription', methods=['GET'])
@jwt_required()
def get_subscription():
    """Plan, status, billing period, plan features and this month's usage."""
    ctx = get_auth_context()
    return success_response(billing_service.get_subscription_details(ctx.tenant_id))


@bp.route('/plans', methods=['GET'])
@jwt_required()
def get_plans():
    return success_response(billing_service.get_plans())


@bp.route('/checkout', methods=['POST'])
@jwt_required()
@admin_required
def create_checkout():
    """
    Start a Stripe Checkout session for a paid plan.

    Request Body:
        {
            "plan": "pro",
            "success_url": "https://app.example.com/billing/success",
            "cancel_url": "https://app.example.com/billing"
        }

    Returns:
        200: {"checkout_url": "https://checkout.stripe.com/..."}
        400: Free plan, missing subscription or Stripe error
    """
    ctx = get_auth_context()
    data = checkout_schema.load(request.get_json(silent=True) or {})

    result = billing_service.create_checkout_session(
        ctx.tenant_id,
        data['plan'],
        data['success_url'],
        data['cancel_url'],
    )

    current_app.logger.info("Billing: checkout started tenant_id=%s plan=%s", ctx.tenant_id, data['plan'])
    return success_response(result)


@bp.route('/portal', methods=['POST'])
@jwt_required()
@admin_required
def create_portal():
    ctx = get_auth_context()
    data = portal_schema.load(request.get_json(silent=True) or {})
    return success_response(billing_service.create_portal_session(ctx.tenant_id, data['return_url']))
