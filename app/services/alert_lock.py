from contextlib import contextmanager
from typing import Iterator

import redis
from redis.exceptions import LockError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class AlertLock:
    """Non-blocking per-alert lock so only one check of an alert runs at a time."""

    def __init__(self, redis_client: redis.Redis, timeout: int = settings.ALERT_LOCK_TIMEOUT):
        self.redis = redis_client
        self.timeout = timeout

    @contextmanager
    def hold(self, alert_id: int) -> Iterator[bool]:
        """Yield True if the lock was taken, False if another check holds it."""
        lock = self.redis.lock(f"alert-lock:{alert_id}", timeout=self.timeout)
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    lock.release()
                except LockError:
                    # lock expired while the check was still running
                    logger.warning("Alert lock expired before release", extra={"alert_id": alert_id})
