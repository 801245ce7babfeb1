"""
Celery tasks for the milk stock ledger.
"""
from datetime import timedelta
import logging

from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_date

logger = logging.getLogger(__name__)


@shared_task
def archive_daily_stock(date=None):
    """
    Close the day: archive its stock record and seed the next day.
    Archives yesterday unless ``date`` (YYYY-MM-DD) is given. Safe to re-run.
    """
    from . import engine

    day = parse_date(date) if date else timezone.localdate() - timedelta(days=1)
    if day is None:
        raise ValueError(f"Invalid archive date: {date!r}")

    try:
        result = engine.archive_and_reset_daily(day)
    except Exception as e:
        logger.error(f"Failed to archive daily stock for {day}: {str(e)}")
        raise

    if result.archived:
        logger.info(f"Archived daily stock for {day}: leftover {result.leftover}L carried forward")
    return {
        'date': day.isoformat(),
        'archived': result.archived,
        'reason': result.reason,
        'leftover': str(result.leftover),
        'reservations_applied': str(result.reservations_applied),
    }
