"""
Thin wrapper around the Claude Messages API.

One completion per call, no SDK retries; a timeout surfaces as an exception
and the caller records the request as failed.
"""
import logging

from anthropic import Anthropic
from flask import current_app

from app.errors import ServiceNotConfigured

logger = logging.getLogger(__name__)

# Initialized on first use
anthropic_client = None


def get_anthropic_client():
    """Get or create Anthropic client"""
    global anthropic_client
    if anthropic_client is None:
        api_key = current_app.config.get('CLAUDE_API_KEY')
        if not api_key:
            raise ServiceNotConfigured("CLAUDE_API_KEY not configured")
        anthropic_client = Anthropic(
            api_key=api_key,
            timeout=current_app.config.get('AI_REQUEST_TIMEOUT', 60.0),
            max_retries=0,
        )
    return anthropic_client


def generate_completion(system_prompt, user_prompt, max_tokens, temperature):
    """Return the model's text reply ('' when the reply has no text block)."""
    client = get_anthropic_client()
    model = current_app.config['CLAUDE_MODEL']

    message = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
    )

    logger.debug("Claude completion finished", extra={
        "model": model,
        "input_tokens": message.usage.input_tokens,
        "output_tokens": message.usage.output_tokens,
    })

    if not message.content:
        return ''
    return getattr(message.content[0], 'text', '') or ''
