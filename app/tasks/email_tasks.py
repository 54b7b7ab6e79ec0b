"""
Celery tasks for team invitation e-mails.
"""
import logging
from typing import Any, Dict
from urllib.parse import urlencode

from app.config import Config
from app.services.email_sender import is_transient_error, send_email_via_ses
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

INVITATION_SUBJECT = "You've been invited to join {tenant_name}"

INVITATION_BODY = """Hi,

{invited_by_name} has invited you to join {tenant_name} as {role_label}.

Create your account here:
{signup_url}

If you weren't expecting this invitation, you can ignore this e-mail.
"""


def render_invitation(email, tenant_name, role, invited_by_name):
    role_label = "an admin" if role == 'admin' else "a team member"
    signup_url = f"{Config.FRONTEND_URL.rstrip('/')}/register?{urlencode({'email': email})}"
    return (
        INVITATION_SUBJECT.format(tenant_name=tenant_name),
        INVITATION_BODY.format(
            invited_by_name=invited_by_name,
            tenant_name=tenant_name,
            role_label=role_label,
            signup_url=signup_url,
        ),
    )


@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def send_invitation_email_task(self, email: str, tenant_name: str, role: str, invited_by_name: str) -> Dict[str, Any]:
    """
    Send a team invitation.

    Transient SES failures are retried; anything else is logged and reported
    in the task result.
    """
    subject, body = render_invitation(email, tenant_name, role, invited_by_name)

    try:
        result = send_email_via_ses(recipient_email=email, subject=subject, body=body)
    except ValueError as e:
        # Misconfiguration or permanent rejection - don't retry
        logger.error("Invitation email not sent", extra={"recipient": email, "error": str(e)})
        return {"success": False, "error": str(e)}
    except Exception as e:
        if is_transient_error(e) and self.request.retries < self.max_retries:
            logger.warning("Transient error sending invitation, will retry", extra={
                "recipient": email,
                "retry": self.request.retries + 1,
                "error": str(e)
            })
            raise self.retry(exc=e)
        logger.error("Failed to send invitation email", extra={"recipient": email, "error": str(e)})
        return {"success": False, "error": str(e)}

    logger.info("Invitation email sent", extra={"recipient": email, "message_id": result['message_id']})
    return {"success": True, "message_id": result['message_id']}
