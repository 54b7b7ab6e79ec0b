from marshmallow import Schema, fields, validate

from app.constants import SUMMARY_STYLES


class SummarizeSchema(Schema):
    """
    Text summarization request.

    Example:
        {
            "text": "Long article text (at least 50 characters)...",
            "max_length": 100,
            "style": "bullet_points"
        }
    """
    text = fields.Str(
        required=True,
        validate=validate.Length(min=50, error="Text must be at least 50 characters"),
        error_messages={"required": "Text is required"},
    )
    max_length = fields.Int(
        load_default=None,
        allow_none=True,
        validate=validate.Range(min=10, max=500, error="max_length must be between 10 and 500"),
    )
    style = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(SUMMARY_STYLES),
    )


class DocumentQaSchema(Schema):
    """
    Document question answering request.

    Example:
        {
            "document_text": "The document to search (at least 50 characters)...",
            "question": "When was the company founded?",
            "context": "Optional extra context"
        }
    """
    document_text = fields.Str(
        required=True,
        validate=validate.Length(min=50, error="Document text must be at least 50 characters"),
        error_messages={"required": "Document text is required"},
    )
    question = fields.Str(
        required=True,
        validate=validate.Length(min=5, error="Question must be at least 5 characters"),
        error_messages={"required": "Question is required"},
    )
    context = fields.Str(load_default=None, allow_none=True)
