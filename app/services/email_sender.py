"""
Email Sender Service

Sends plain-text transactional e-mail (team invitations) through AWS SES.
"""
import logging
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional, Dict, Any

from app.config import Config

logger = logging.getLogger(__name__)

# Global SES client (initialized on first use)
_ses_client = None

TRANSIENT_ERROR_CODES = ('Throttling', 'ServiceUnavailable', 'TooManyRequests', 'RequestTimeout')


def get_ses_client():
    """Get or create AWS SES client."""
    global _ses_client

    if _ses_client is not None:
        return _ses_client

    # Validate AWS credentials
    if not Config.AWS_ACCESS_KEY_ID or not Config.AWS_SECRET_ACCESS_KEY:
        raise ValueError("AWS credentials not configured. Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY in environment.")

    _ses_client = boto3.client(
        'ses',
        aws_access_key_id=Config.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=Config.AWS_SECRET_ACCESS_KEY,
        region_name=Config.AWS_REGION
    )
    logger.info("AWS SES client initialized", extra={"region": Config.AWS_REGION, "sender": Config.SES_SENDER_EMAIL})
    return _ses_client


def is_transient_error(error: Exception) -> bool:
    """Check if error is transient and should be retried."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code', '') in TRANSIENT_ERROR_CODES
    return isinstance(error, BotoCoreError)


def send_email_via_ses(
    recipient_email: str,
    subject: str,
    body: str,
    sender_email: Optional[str] = None
) -> Dict[str, Any]:
    """
    Send email via AWS SES.

    Args:
        recipient_email: Recipient email address
        subject: Email subject
        body: Email body (plain text)
        sender_email: Sender email (defaults to SES_SENDER_EMAIL from config)

    Returns:
        Dict with 'message_id' and 'success' keys

    Raises:
        ValueError: Invalid input, SES misconfiguration or a permanent SES rejection
        ClientError / BotoCoreError: Transient failures, left for the caller to retry
    """
    if not recipient_email or not recipient_email.strip():
        raise ValueError("Recipient email is required")

    if not subject or not subject.strip():
        raise ValueError("Email subject is required")

    sender = sender_email or Config.SES_SENDER_EMAIL
    if not sender:
        raise ValueError("Sender email not configured. Set SES_SENDER_EMAIL in environment.")

    ses_client = get_ses_client()

    try:
        response = ses_client.send_email(
            Source=sender,
            Destination={
                'ToAddresses': [recipient_email.strip()]
            },
            Message={
                'Subject': {
                    'Data': subject,
                    'Charset': 'UTF-8'
                },
                'Body': {
                    'Text': {
                        'Data': body,
                        'Charset': 'UTF-8'
                    }
                }
            }
        )
    except ClientError as e:
        if is_transient_error(e):
            raise

        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_message = e.response.get('Error', {}).get('Message', str(e))
        logger.error("SES API error", extra={
            "error_code": error_code,
            "error_message": error_message,
            "recipient": recipient_email
        })
        raise ValueError(f"AWS SES error ({error_code}): {error_message}")

    message_id = response.get('MessageId')
    logger.info("Email sent successfully via SES", extra={
        "message_id": message_id,
        "recipient": recipient_email,
        "sender": sender
    })

    return {
        'success': True,
        'message_id': message_id,
    }
