"""
Worker process for outbound invitation email.

The API only enqueues; delivery through Resend happens here. Run with::

    celery -A app.workers.celery_app worker -Q email
"""

from celery import Celery

from app.core.config import settings

EMAIL_QUEUE = "email"

celery_app = Celery(
    "projecthub",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.workers.email_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    enable_utc=True,
    timezone="UTC",
    # Delivery results are only looked at when chasing a bounced invite
    result_expires=3600,
    # An email task lost with its worker goes back on the queue
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_queues={"default": {}, EMAIL_QUEUE: {}},
    task_routes={
        "app.workers.email_tasks.send_invitation_email": {"queue": EMAIL_QUEUE},
    },
)
