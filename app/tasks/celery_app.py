from celery import Celery
from dotenv import load_dotenv
import os
import sys

load_dotenv()

# Priority: REDIS_URL > CELERY_BROKER_URL > CELERY_RESULT_BACKEND
redis_url = (
    os.getenv('REDIS_URL') or
    os.getenv('CELERY_BROKER_URL') or
    os.getenv('CELERY_RESULT_BACKEND') or
    'redis://localhost:6379/0'
).strip()

# Some providers hand out TLS URLs without the scheme we expect
if not redis_url.startswith(('redis://', 'rediss://')):
    redis_url = f'redis://{redis_url}'

# Detect Windows and set appropriate pool
is_windows = sys.platform.startswith('win')
pool_type = 'solo' if is_windows else 'prefork'

celery_app = Celery(
    'ai_saas',
    broker=redis_url,
    backend=redis_url
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    broker_connection_retry_on_startup=True,
    worker_pool=pool_type,
    broker_transport_options={
        'visibility_timeout': 3600,
    },
)

# Tasks register themselves via @celery_app.task when app.tasks is imported
celery_app.autodiscover_tasks(['app.tasks'])


def init_celery(app):
    """
    Bind Celery to the Flask app so tasks run inside an app context and can
    use the database session.
    """
    celery_app.conf.update(
        broker_url=app.config.get('CELERY_BROKER_URL') or redis_url,
        result_backend=app.config.get('CELERY_RESULT_BACKEND') or redis_url,
    )

    class ContextTask(celery_app.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return super().__call__(*args, **kwargs)

    celery_app.Task = ContextTask
    return celery_app
