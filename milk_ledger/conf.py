"""
Access to the ``MILK_LEDGER`` settings dict with per-key defaults.
"""
from django.conf import settings

DEFAULTS = {
    'SUBSTANDARD_RATING': 3,
    'SUSPENSION_THRESHOLD': 3,
    'DEFAULT_RESERVATION_TYPE': 'subscription',
    'WEEKLY_DIVISOR': 7,
    'MONTHLY_DIVISOR': 30,
    'ARCHIVE_SCHEDULE_HOUR': 0,
    'ARCHIVE_SCHEDULE_MINUTE': 5,
    'SUMMARY_DEFAULT_DAYS': 30,
}


def ledger_setting(name):
    """Return ``settings.MILK_LEDGER[name]`` or the built-in default."""
    configured = getattr(settings, 'MILK_LEDGER', None) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]
