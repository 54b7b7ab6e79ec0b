from marshmallow import Schema, fields, validates, ValidationError


class RegisterSchema(Schema):
    """
    Registration Request Validation Schema

    Validates user registration input:
    - Email must be valid format
    - Password at least 6 characters
    - Name and workspace name between 2 and 100 characters

    Example:
        schema = RegisterSchema()
        result = schema.load(request_data)
    """
    email = fields.Email(required=True, error_messages={
        "required": "Email is required",
        "invalid": "Invalid email format"
    })

    password = fields.Str(required=True, error_messages={
        "required": "Password is required"
    })

    name = fields.Str(required=True, error_messages={
        "required": "Name is required"
    })

    tenant_name = fields.Str(required=True, error_messages={
        "required": "Company/workspace name is required"
    })

    @validates('password')
    def validate_password(self, value, **kwargs):
        """
        Validate password length

        Raises:
            ValidationError: If password is shorter than 6 characters
        """
        if len(value) < 6:
            raise ValidationError("Password must be at least 6 characters long")

    @validates('name')
    def validate_name(self, value, **kwargs):
        if len(value.strip()) < 2:
            raise ValidationError("Name must be at least 2 characters")

        if len(value) > 100:
            raise ValidationError("Name must be at most 100 characters")

    @validates('tenant_name')
    def validate_tenant_name(self, value, **kwargs):
        """
        Validate company/workspace name

        Requirements:
        - Minimum 2 characters
        - Maximum 100 characters
        """
        if len(value.strip()) < 2:
            raise ValidationError("Company name must be at least 2 characters")

        if len(value) > 100:
            raise ValidationError("Company name must be at most 100 characters")


class LoginSchema(Schema):
    email = fields.Email(required=True, error_messages={
        "required": "Email is required",
        "invalid": "Invalid email format"
    })

    password = fields.Str(required=True, error_messages={
        "required": "Password is required"
    })

    @validates('password')
    def validate_password(self, value, **kwargs):
        if len(value) < 6:
            raise ValidationError("Password must be at least 6 characters long")


class RefreshSchema(Schema):
    refresh_token = fields.Str(required=True, error_messages={
        "required": "Refresh token is required"
    })

    @validates('refresh_token')
    def validate_refresh_token(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Refresh token is required")


class UserResponseSchema(Schema):
    """
    User Response Schema

    Defines what user data is returned to frontend.
    Never return password_hash or sensitive data!
    """
    user_id = fields.Str()
    email = fields.Email()
    name = fields.Str()
    avatar = fields.Str(allow_none=True)
    role = fields.Str()
    tenant_id = fields.Str()
    is_active = fields.Bool()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class TenantResponseSchema(Schema):
    """
    Tenant Response Schema

    Defines what tenant data is returned.
    """
    tenant_id = fields.Str()
    name = fields.Str()
    slug = fields.Str()
    plan = fields.Str()
    is_active = fields.Bool()
    settings = fields.Dict()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
