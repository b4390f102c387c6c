from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

def _connect_redis():
    """Redis client for rate limit storage, or None to fall back to memory."""
    if not settings.RATE_LIMIT_ENABLED:
        return None
    try:
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            decode_responses=True,
            retry_on_timeout=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        client.ping()
        logger.info(f"Rate limiting Redis connected: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return client
    except redis.RedisError as e:
        logger.warning(f"Rate limiting Redis connection failed: {e}. Using in-memory fallback.")
        return None

redis_client = _connect_redis()

def get_user_id_or_ip(request: Request):
    """
    Rate limit key: the authenticated user (set on request.state by
    get_current_user) or, failing that, the client address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"

limiter = Limiter(
    key_func=get_user_id_or_ip,
    storage_uri=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}" if redis_client else "memory://",
    default_limits=["1000/hour"],
    enabled=settings.RATE_LIMIT_ENABLED,
)

RATE_LIMITS = {
    # Friend requests and profile reads
    "api_read": "200/hour",
    # Sending and answering friend requests, profile edits
    "api_write": "100/hour",
    # Emergency nudges send real email
    "nudge": "3/minute;20/day",
}

def get_rate_limit_for_endpoint(endpoint: str) -> str:
    """Get rate limit configuration for specific endpoint."""
    return RATE_LIMITS.get(endpoint, "100/hour")

def rate_limit_api_read(func):
    """Rate limit for read API endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_read"))(func)

def rate_limit_api_write(func):
    """Rate limit for write API endpoints."""
    return limiter.limit(get_rate_limit_for_endpoint("api_write"))(func)

def rate_limit_nudge(func):
    """Rate limit for emergency nudges."""
    return limiter.limit(get_rate_limit_for_endpoint("nudge"))(func)
