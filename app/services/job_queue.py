from typing import Optional

from celery import Celery

from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.alert import AlertSnapshot

logger = get_logger(__name__)

CHECK_ALERT_TASK = "price_checks.check_alert"


def backoff_delay(retries: int, base: int = settings.PRICE_CHECK_BACKOFF_SECONDS) -> int:
    """Seconds to wait before the next attempt: 5s, 10s, 20s, ..."""
    return base * 2 ** retries


class PriceCheckQueue:
    """Enqueues price-check jobs on the Celery broker."""

    def __init__(
        self,
        app: Celery = celery_app,
        max_attempts: int = settings.PRICE_CHECK_MAX_ATTEMPTS,
    ):
        self.app = app
        self.max_attempts = max_attempts

    def enqueue(self, alert: AlertSnapshot, attempts: Optional[int] = None) -> str:
        """Queue one check of the alert snapshot and return the job id."""
        attempts = attempts or self.max_attempts
        result = self.app.send_task(
            CHECK_ALERT_TASK,
            args=[alert.model_dump(mode="json")],
            kwargs={"attempts": attempts},
        )
        logger.debug(
            "Queued price check",
            extra={"alert_id": alert.id, "job_id": result.id, "attempts": attempts},
        )
        return result.id
