"""
Celery tasks for the sale engine.
"""

import logging

from celery import shared_task

from .stock_guard import StockGuard

logger = logging.getLogger(__name__)


@shared_task
def release_expired_reservations():
    """
    Hand back stock held by checkouts that never completed.

    Scheduled every minute by Celery beat.

    Returns:
        int: Number of reservations released
    """
    try:
        released = StockGuard().release_expired()
    except Exception as exc:
        logger.error(f"Failed to release expired reservations: {str(exc)}")
        raise

    logger.info(f"Expired reservation sweep released {released} reservations")
    return released
