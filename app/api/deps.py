from typing import Generator

from app.core.redis import redis_client
from app.db.session import SessionLocal
from app.providers.factory import get_token_cache
from app.services.airports import AirportLookupCache
from app.services.alert_store import SqlAlertStore
from app.services.job_queue import PriceCheckQueue
from app.services.scheduler import PriceCheckScheduler


# Database dependency
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_scheduler() -> PriceCheckScheduler:
    return PriceCheckScheduler(store=SqlAlertStore(SessionLocal), queue=PriceCheckQueue())


def get_airport_cache() -> AirportLookupCache:
    return AirportLookupCache(redis_client, get_token_cache())
