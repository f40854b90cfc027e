import redis

from app.core.config import settings

# Shared Redis client for caches and locks
redis_client = redis.Redis(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
    password=settings.REDIS_PASSWORD,
    decode_responses=True,
    socket_timeout=settings.HTTP_TIMEOUT_SECONDS,
)
