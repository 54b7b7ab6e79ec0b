"""
Celery entry point for running worker commands.

Usage:
    celery -A celery_worker worker --loglevel=info
    celery -A celery_worker worker --loglevel=info --pool=solo   (Windows)
"""
from app import create_app
from app.tasks.celery_app import celery_app

# Binds tasks to the Flask app context and config
flask_app = create_app()

# Import tasks so the @celery_app.task decorators register them
from app.tasks import email_tasks  # noqa: E402,F401

if __name__ == '__main__':
    celery_app.start()
