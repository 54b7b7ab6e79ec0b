from marshmallow import Schema, fields, validate

from app.constants import BILLING_PLANS


class CheckoutSchema(Schema):
    plan = fields.Str(
        required=True,
        validate=validate.OneOf(BILLING_PLANS),
        error_messages={"required": "Plan is required"},
    )
    success_url = fields.Url(require_tld=False, required=True, error_messages={
        "required": "success_url is required",
        "invalid": "success_url must be a valid URL"
    })
    cancel_url = fields.Url(require_tld=False, required=True, error_messages={
        "required": "cancel_url is required",
        "invalid": "cancel_url must be a valid URL"
    })


class PortalSchema(Schema):
    return_url = fields.Url(require_tld=False, required=True, error_messages={
        "required": "return_url is required",
        "invalid": "return_url must be a valid URL"
    })
