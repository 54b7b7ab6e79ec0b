from marshmallow import Schema, fields, validate, EXCLUDE

from app.constants import USER_ROLES
from app.schemas.common import PaginationSchema


class UserListQuerySchema(PaginationSchema):
    sort_by = fields.Str(
        load_default='created_at',
        validate=validate.OneOf(['created_at', 'name', 'email', 'role']),
    )
    sort_order = fields.Str(load_default='desc', validate=validate.OneOf(['asc', 'desc']))


class UserUpdateSchema(Schema):
    """
    Profile update. Password changes are not accepted here; unknown keys
    (password included) are dropped on load.
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(validate=validate.Length(min=2, max=100))
    avatar = fields.Str(allow_none=True)
    role = fields.Str(validate=validate.OneOf(USER_ROLES))


class InviteUserSchema(Schema):
    email = fields.Email(required=True, error_messages={
        "required": "Email is required",
        "invalid": "Invalid email format"
    })
    role = fields.Str(
        required=True,
        validate=validate.OneOf(USER_ROLES),
        error_messages={"required": "Role is required"},
    )
