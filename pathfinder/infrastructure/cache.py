import json
import redis
import structlog
from typing import Optional, Any
from ..config import settings

logger = structlog.get_logger(__name__)

_redis_client: Optional[redis.Redis] = None

def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client

def analysis_key(domain: str) -> str:
    return f"analysis:{domain.strip().lower()}"

def get_cache(key: str) -> Optional[Any]:
    """Read a JSON value from the cache; an unreachable Redis is a miss."""
    try:
        value = get_redis().get(key)
        if value:
            return json.loads(value)
    except (redis.RedisError, ValueError) as exc:
        logger.warning("cache_read_failed", key=key, error=str(exc))
    return None

def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    try:
        ttl = ttl or settings.CACHE_TTL
        get_redis().setex(key, ttl, json.dumps(value, ensure_ascii=False))
        return True
    except (redis.RedisError, TypeError, ValueError) as exc:
        logger.warning("cache_write_failed", key=key, error=str(exc))
        return False
