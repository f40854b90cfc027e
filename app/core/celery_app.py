from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.core.config import settings
from app.core.logging import setup_logging

# Create Celery app
celery_app = Celery(
    "tasks",
    broker=settings.redis_url,
    include=["app.tasks.price"],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_hijack_root_logger=False,
    # At-least-once delivery: ack after the job finishes, redeliver if the worker dies
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_transport_options={"visibility_timeout": settings.CELERY_VISIBILITY_TIMEOUT},
    worker_concurrency=settings.CELERY_WORKERS,
    task_soft_time_limit=settings.PRICE_CHECK_TIME_LIMIT,
    task_time_limit=settings.PRICE_CHECK_TIME_LIMIT + 30,
    task_ignore_result=True,
    # Queue due alerts once per interval
    beat_schedule={
        "schedule-price-checks": {
            "task": "price_checks.schedule_due_alerts",
            "schedule": settings.PRICE_CHECK_INTERVAL,
        },
    },
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the structured JSON logger in workers and beat."""
    setup_logging("app", settings.LOG_LEVEL)

