from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.alert import TickResult
from app.services.alert_store import AlertStore
from app.services.job_queue import PriceCheckQueue

logger = get_logger(__name__)


class PriceCheckScheduler:
    """Turns due alerts into price-check jobs, one job per alert per tick."""

    def __init__(
        self,
        store: AlertStore,
        queue: PriceCheckQueue,
        freshness_window: timedelta = timedelta(seconds=settings.PRICE_CHECK_FRESHNESS),
        batch_size: int = settings.PRICE_CHECK_BATCH_SIZE,
    ):
        self.store = store
        self.queue = queue
        self.freshness_window = freshness_window
        self.batch_size = batch_size

    def run_tick(self, now: Optional[datetime] = None) -> TickResult:
        """
        Queue a check for every due alert.

        Failing to load the due list aborts the tick; the next tick retries.
        Failing to queue one alert is logged and the rest are still queued.
        """
        now = now or datetime.now(timezone.utc)
        result = TickResult(started_at=now)
        logger.info("Starting scheduled price checks")

        try:
            alerts = self.store.list_due_alerts(now, self.freshness_window, self.batch_size)
        except Exception:
            logger.error("Failed to load due alerts, skipping this tick", exc_info=True)
            raise

        result.selected = len(alerts)
        if not alerts:
            logger.info("No alerts to check")
            return result

        logger.info(f"Queueing {len(alerts)} price alerts for checking")
        for alert in alerts:
            try:
                self.queue.enqueue(alert)
                result.enqueued += 1
            except Exception:
                result.failed += 1
                logger.error(
                    "Failed to queue price check", extra={"alert_id": alert.id}, exc_info=True
                )

        logger.info(
            "Finished queueing price checks",
            extra={"enqueued": result.enqueued, "failed": result.failed},
        )
        return result

    def trigger_manual_check(self, alert_id: int) -> str:
        """Queue a single-attempt check of one alert, ignoring the due filter."""
        alert = self.store.get_alert(alert_id)
        job_id = self.queue.enqueue(alert, attempts=1)
        logger.info(f"Manually triggered price check for alert {alert_id}", extra={"job_id": job_id})
        return job_id
