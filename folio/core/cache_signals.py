"""
Cache invalidation signals
Automatically invalidate cached feeds and summaries when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    invalidate_cache_pattern, EVENTS_FEED_PREFIX, TRENDING_PRODUCTS_PREFIX,
    DASHBOARD_PREFIX, VENDOR_ANALYTICS_PREFIX,
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations (seeding, imports) to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


# --- Manual Invalidation Helpers ---

def invalidate_events_cache_manual():
    """Manually invalidate the events feed cache"""
    try:
        invalidate_cache_pattern(EVENTS_FEED_PREFIX)
        logger.info("Invalidated events feed cache (Manual/Signal)")
    except Exception as e:
        logger.warning(f"Error invalidating events feed cache: {e}")


def invalidate_products_cache_manual():
    """Manually invalidate trending products and vendor analytics"""
    try:
        invalidate_cache_pattern(TRENDING_PRODUCTS_PREFIX)
        invalidate_cache_pattern(VENDOR_ANALYTICS_PREFIX)
        logger.info("Invalidated products cache (Manual/Signal)")
    except Exception as e:
        logger.warning(f"Error invalidating products cache: {e}")


def invalidate_dashboard_cache_manual():
    """Manually invalidate dashboard cache"""
    try:
        invalidate_cache_pattern(DASHBOARD_PREFIX)
        logger.info("Invalidated dashboard cache (Manual/Signal)")
    except Exception as e:
        logger.warning(f"Error invalidating dashboard cache: {e}")


# --- Signal Handlers ---

@receiver([post_save, post_delete])
def invalidate_events_cache(sender, instance, **kwargs):
    """Invalidate the events feed when events or RSVPs change"""
    if is_suspended():
        return

    if sender.__name__ in ['Event', 'EventRSVP', 'EventProduct']:
        try:
            from folio.events.models import Event, EventRSVP, EventProduct
            if isinstance(instance, (Event, EventRSVP, EventProduct)):
                invalidate_events_cache_manual()
                invalidate_dashboard_cache_manual()
        except Exception as e:
            logger.warning(f"Error in invalidate_events_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_products_cache(sender, instance, **kwargs):
    """Invalidate product-derived caches when products change"""
    if is_suspended():
        return

    if sender.__name__ == 'Product':
        try:
            from folio.catalog.models import Product
            if isinstance(instance, Product):
                invalidate_products_cache_manual()
                invalidate_dashboard_cache_manual()
        except Exception as e:
            logger.warning(f"Error in invalidate_products_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_selection_cache(sender, instance, **kwargs):
    """Selections feed the dashboard counts"""
    if is_suspended():
        return

    if sender.__name__ in ['Selection', 'Project']:
        try:
            from folio.projects.models import Selection, Project
            if isinstance(instance, (Selection, Project)):
                invalidate_dashboard_cache_manual()
        except Exception as e:
            logger.warning(f"Error in invalidate_selection_cache signal: {e}")
