"""
Cache invalidation signals
Finance and order statistics caches are dropped whenever orders,
employees or salary records change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_finance_cache

logger = logging.getLogger(__name__)

FINANCE_MODELS = ('Order', 'OrderItem', 'Employee', 'SalaryRecord')

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_finance_on_change(sender, instance, **kwargs):
    """Invalidate finance caches when order or payroll data changes"""
    if is_suspended() or sender.__name__ not in FINANCE_MODELS:
        return
    if sender._meta.app_label not in ('orders', 'employees'):
        return
    try:
        invalidate_finance_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_finance_on_change signal: {e}")
