"""
Caching utilities for expensive queries
Uses Redis (django-redis) when configured, the local memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
EVENTS_FEED_CACHE_TTL = 120  # 2 minutes
TRENDING_PRODUCTS_CACHE_TTL = 300  # 5 minutes
DASHBOARD_CACHE_TTL = 300  # 5 minutes
ROOM_TEMPLATES_CACHE_TTL = 3600  # 1 hour

# Key prefixes, also used as invalidation patterns
EVENTS_FEED_PREFIX = 'events_feed'
TRENDING_PRODUCTS_PREFIX = 'trending_products'
DASHBOARD_PREFIX = 'dashboard_summary'
VENDOR_ANALYTICS_PREFIX = 'vendor_analytics'

# Prefixes created through make_cache_key in this process; used when the
# backend cannot SCAN (LocMemCache in development and tests)
_known_keys = {}


def _tracks_local_keys():
    return 'django_redis' not in settings.CACHES.get('default', {}).get('BACKEND', '')


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    key = f"{prefix}:{key_hash}"
    if _tracks_local_keys():
        _known_keys.setdefault(prefix, set()).add(key)
    return key


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="events_feed")
        def get_feed(role, page):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

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


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Uses Redis SCAN when django-redis is the backend; otherwise deletes the
    keys this process generated for the prefix
    """
    matched = [prefix for prefix in _known_keys if pattern in prefix]
    local_keys = [key for prefix in matched for key in _known_keys.pop(prefix, ())]
    if local_keys:
        cache.delete_many(local_keys)

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
    except NotImplementedError:
        # Not a Redis cache backend
        logger.debug(f"Invalidated {len(local_keys)} local cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")
