from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from app.schemas.ai_schema import DocumentQaSchema, SummarizeSchema
from app.schemas.common import PaginationSchema
from app.security import get_auth_context
from app.services import ai_service
from app.utils.responses import pagination_metadata, success_response

bp = Blueprint('ai', __name__)

summarize_schema = SummarizeSchema()
qa_schema = DocumentQaSchema()
pagination_schema = PaginationSchema()


@bp.route('/summarize', methods=['POST'])
@jwt_required()
def summarize():
    """
    Text Summarization Endpoint (2 credits)

    Request Body:
        {"text": "...", "max_length": 100, "style": "bullet_points"}

    Returns:
        200: {"summary", "original_length", "summary_length", "credits_used"}
        400: Validation error / model call failed (AI_SERVICE_ERROR)
        402: Not enough credits left this month
    """
    ctx = get_auth_context()
    data = summarize_schema.load(request.get_json(silent=True) or {})

    result = ai_service.summarize_text(ctx, data['text'], max_length=data['max_length'], style=data['style'])

    current_app.logger.debug("AI: summarize done for tenant_id=%s", ctx.tenant_id)
    return success_response(result)


@bp.route('/qa', methods=['POST'])
@jwt_required()
def document_qa():
    """
    Document Q&A Endpoint (3 credits)

    Request Body:
        {"document_text": "...", "question": "...", "context": "optional"}

    Returns:
        200: {"answer", "confidence", "source_text", "credits_used"}
    """
    ctx = get_auth_context()
    data = qa_schema.load(request.get_json(silent=True) or {})

    result = ai_service.answer_question(ctx, data['document_text'], data['question'], context=data['context'])

    current_app.logger.debug("AI: qa done for tenant_id=%s", ctx.tenant_id)
    return success_response(result)


@bp.route('/history', methods=['GET'])
@jwt_required()
def history():
    ctx = get_auth_context()
    params = pagination_schema.load(request.args)

    result = ai_service.get_history(ctx, params['page'], params['limit'])

    return success_response(
        {
            "requests": [ai_request.to_dict() for ai_request in result['requests']],
            "total": result['total'],
        },
        metadata=pagination_metadata(params['page'], params['limit'], result['total']),
    )
