from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.logging import get_logger
from app.core.redis import redis_client
from app.db.session import SessionLocal
from app.providers.factory import get_flight_provider
from app.schemas.alert import AlertSnapshot
from app.services.alert_lock import AlertLock
from app.services.alert_store import SqlAlertStore
from app.services.job_queue import CHECK_ALERT_TASK, PriceCheckQueue, backoff_delay
from app.services.notification import NotificationDispatcher
from app.services.price_check import PriceCheckWorker
from app.services.scheduler import PriceCheckScheduler

logger = get_logger(__name__)


def build_price_check_worker() -> PriceCheckWorker:
    alert_lock = AlertLock(redis_client) if settings.STRICT_SINGLE_FLIGHT else None
    return PriceCheckWorker(
        provider=get_flight_provider(),
        store=SqlAlertStore(SessionLocal),
        dispatcher=NotificationDispatcher(),
        alert_lock=alert_lock,
    )


def build_scheduler() -> PriceCheckScheduler:
    return PriceCheckScheduler(store=SqlAlertStore(SessionLocal), queue=PriceCheckQueue())


@celery_app.task(bind=True, name=CHECK_ALERT_TASK)
def check_alert_price(self, snapshot: dict, attempts: int = settings.PRICE_CHECK_MAX_ATTEMPTS):
    """Celery task to check one alert; failures are retried with exponential backoff."""
    alert = AlertSnapshot.model_validate(snapshot)
    worker = build_price_check_worker()

    try:
        result = worker.process(alert)
    except Exception as exc:
        attempt = self.request.retries + 1
        if attempt >= attempts:
            # last_checked_at stays untouched so the next tick picks the alert up again
            logger.error(
                f"Price check for alert {alert.id} permanently failed after {attempt} attempts: {exc}",
                extra={"alert_id": alert.id, "attempts": attempt},
            )
            raise

        countdown = backoff_delay(self.request.retries)
        logger.warning(
            f"Price check for alert {alert.id} failed, retrying in {countdown}s: {exc}",
            extra={"alert_id": alert.id, "attempt": attempt, "countdown": countdown},
        )
        raise self.retry(exc=exc, countdown=countdown, max_retries=attempts - 1)

    return result.model_dump(mode="json")


@celery_app.task(name="price_checks.schedule_due_alerts")
def schedule_price_checks():
    """Celery beat task that queues a price check for every due alert."""
    result = build_scheduler().run_tick()
    return result.model_dump(mode="json")
