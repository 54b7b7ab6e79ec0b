from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class TenantUpdateSchema(Schema):
    """
    Tenant update request. Both fields optional, at least one required.

    The slug is normalized the same way registration derives it, so
    "Acme Labs" becomes "acme-labs".
    """
    name = fields.Str(validate=validate.Length(min=2, max=100))
    slug = fields.Str(validate=validate.Length(min=2, max=50))

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide name and/or slug")


class CustomBrandingSchema(Schema):
    logo = fields.Str(allow_none=True)
    primary_color = fields.Str(allow_none=True)
    secondary_color = fields.Str(allow_none=True)


class TenantSettingsSchema(Schema):
    ai_credits_limit = fields.Int(validate=validate.Range(min=0))
    api_rate_limit = fields.Int(validate=validate.Range(min=1))
    custom_branding = fields.Nested(CustomBrandingSchema)
