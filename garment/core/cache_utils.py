"""
Caching utilities for expensive report queries
Uses Redis in production, the local-memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
FINANCE_CACHE_TTL = 300  # 5 minutes
ORDER_STATS_CACHE_TTL = 120  # 2 minutes

FINANCE_CACHE_PREFIX = "finance"
ORDER_STATS_CACHE_PREFIX = "order_stats"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix="finance")
        def build_summary(start_date, end_date):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(f"{key_prefix}:{func.__name__}", *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def _uses_redis():
    return 'django_redis' in settings.CACHES['default']['BACKEND']


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Redis is scanned for matching keys; other backends cannot enumerate keys
    and are cleared entirely
    """
    if not _uses_redis():
        cache.clear()
        logger.debug(f"Cleared local cache for pattern: {pattern}")
        return

    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_finance_cache():
    """Invalidate finance summary/monthly/KPI and order statistics caches"""
    invalidate_cache_pattern(FINANCE_CACHE_PREFIX)
    invalidate_cache_pattern(ORDER_STATS_CACHE_PREFIX)
