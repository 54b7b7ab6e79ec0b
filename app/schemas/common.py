from marshmallow import Schema, fields, validate, EXCLUDE


class PaginationSchema(Schema):
    """Query-string pagination: ?page=1&limit=10"""

    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))
