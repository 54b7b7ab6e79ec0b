"""
AI Service - Credit-metered gateway in front of Claude.

Each call walks one AiRequest row through:
    processing -> completed   (output stored, usage incremented)
    processing -> failed      (error stored, no credits charged)

The credit check happens before the model call and the increment after it,
so two requests racing near the ceiling can both pass. The monthly limit is
therefore soft.
"""
import json
import logging
import re
import time

from app.constants import (
    AI_DOCUMENT_QA,
    AI_SERVICE_CREDITS,
    AI_STATUS_COMPLETED,
    AI_STATUS_FAILED,
    AI_STATUS_PROCESSING,
    AI_TEXT_SUMMARIZATION,
)
from app.errors import BadRequest, PaymentRequired
from app.extensions import db
from app.models.ai_request import AiRequest
from app.services import tenant_service
from app.services.llm_client import generate_completion

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPTS = {
    'bullet_points': (
        "You are a helpful assistant that creates concise bullet-point summaries. "
        "Format your response as clear, informative bullet points."
    ),
    'executive_summary': (
        "You are a helpful assistant that creates executive summaries. "
        "Provide a professional, high-level overview suitable for business leaders."
    ),
    'paragraph': "You are a helpful assistant that creates clear, concise paragraph summaries.",
}

QA_SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided document. "
    "If the answer cannot be found in the document, say \"I cannot find the answer in the provided document.\" "
    "Always provide the specific text from the document that supports your answer when possible."
)

SUMMARY_DEFAULT_MAX_TOKENS = 500
SUMMARY_MAX_TOKENS_CAP = 1000
QA_MAX_TOKENS = 800


def check_credits(tenant_id, credits_required):
    usage = tenant_service.get_tenant_usage(tenant_id)
    if usage['ai_credits_used'] + credits_required > usage['ai_credits_limit']:
        raise PaymentRequired("Insufficient AI credits. Please upgrade your plan.")


def get_summary_system_prompt(style):
    return SUMMARY_SYSTEM_PROMPTS.get(style, SUMMARY_SYSTEM_PROMPTS['paragraph'])


def calculate_confidence(answer):
    """Phrase heuristic; matching is case-sensitive."""
    if 'cannot find' in answer or 'not mentioned' in answer:
        return 0.1
    if 'specifically states' in answer or 'according to' in answer:
        return 0.9
    return 0.7


def extract_source_text(document, answer):
    """First document sentence sharing a word with the start of the answer."""
    answer_words = answer.lower().split(' ')[:5]
    for sentence in re.split(r'[.!?]+', document):
        sentence_lower = sentence.lower()
        if any(word in sentence_lower for word in answer_words):
            return sentence.strip()
    return None


def _start_request(ctx, request_type, payload, credits_required):
    ai_request = AiRequest(
        tenant_id=ctx.tenant_id,
        user_id=ctx.user_id,
        request_type=request_type,
        input=json.dumps(payload),
        status=AI_STATUS_PROCESSING,
        credits_used=credits_required,
    )
    db.session.add(ai_request)
    db.session.commit()
    return ai_request


def _elapsed_ms(started):
    return int((time.monotonic() - started) * 1000)


def _run_request(ctx, request_type, payload, system_prompt, user_prompt, max_tokens, temperature, failure_message):
    """
    Meter and execute one model call. Returns (output, credits_used).

    Raises:
        PaymentRequired: the tenant is out of credits (nothing is recorded)
        BadRequest (AI_SERVICE_ERROR): the model call failed
    """
    credits_required = AI_SERVICE_CREDITS[request_type]
    check_credits(ctx.tenant_id, credits_required)

    ai_request = _start_request(ctx, request_type, payload, credits_required)
    started = time.monotonic()

    try:
        output = generate_completion(system_prompt, user_prompt, max_tokens, temperature)
    except Exception as e:
        ai_request.status = AI_STATUS_FAILED
        ai_request.error_message = str(e) or e.__class__.__name__
        ai_request.processing_time_ms = _elapsed_ms(started)
        ai_request.credits_used = 0
        db.session.commit()

        logger.error("AI request failed", extra={
            "request_id": ai_request.request_id,
            "tenant_id": ctx.tenant_id,
            "type": request_type,
            "error": str(e),
        })
        raise BadRequest(failure_message, code='AI_SERVICE_ERROR')

    ai_request.output = output
    ai_request.status = AI_STATUS_COMPLETED
    ai_request.processing_time_ms = _elapsed_ms(started)
    db.session.commit()

    tenant_service.increment_usage(ctx.tenant_id, ai_credits=credits_required, api_requests=1)

    logger.info("AI request completed", extra={
        "request_id": ai_request.request_id,
        "tenant_id": ctx.tenant_id,
        "type": request_type,
        "processing_time_ms": ai_request.processing_time_ms,
    })
    return output, credits_required


def summarize_text(ctx, text, max_length=None, style=None):
    payload = {"text": text, "max_length": max_length, "style": style}

    length_hint = f" in approximately {max_length} words" if max_length else ""
    user_prompt = f"Please summarize the following text{length_hint}:\n\n{text}"
    max_tokens = min(max_length * 2, SUMMARY_MAX_TOKENS_CAP) if max_length else SUMMARY_DEFAULT_MAX_TOKENS

    summary, credits_used = _run_request(
        ctx,
        AI_TEXT_SUMMARIZATION,
        payload,
        system_prompt=get_summary_system_prompt(style or 'paragraph'),
        user_prompt=user_prompt,
        max_tokens=max_tokens,
        temperature=0.3,
        failure_message="Failed to summarize text",
    )

    return {
        "summary": summary,
        "original_length": len(text),
        "summary_length": len(summary),
        "credits_used": credits_used,
    }


def answer_question(ctx, document_text, question, context=None):
    payload = {"document_text": document_text, "question": question, "context": context}

    user_prompt = f"Document: {document_text}\n\nQuestion: {question}"
    if context:
        user_prompt += f"\n\nAdditional context: {context}"

    answer, credits_used = _run_request(
        ctx,
        AI_DOCUMENT_QA,
        payload,
        system_prompt=QA_SYSTEM_PROMPT,
        user_prompt=user_prompt,
        max_tokens=QA_MAX_TOKENS,
        temperature=0.1,
        failure_message="Failed to answer question",
    )

    return {
        "answer": answer,
        "confidence": calculate_confidence(answer),
        "source_text": extract_source_text(document_text, answer),
        "credits_used": credits_used,
    }


def get_history(ctx, page=1, limit=10):
    query = AiRequest.query.filter_by(tenant_id=ctx.tenant_id)
    total = query.count()
    requests = (
        query.order_by(AiRequest.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"requests": requests, "total": total}
