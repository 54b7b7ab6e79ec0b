"""
Celery tasks package.

Import directly from modules when needed:
  from app.tasks.celery_app import celery_app
  from app.tasks.email_tasks import send_invitation_email_task
"""
