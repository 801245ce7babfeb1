"""
Converts recurring subscriptions into a liters-per-day figure.

Each subscription contributes its quantity scaled to one day (daily as-is,
weekly / 7, monthly / 30). The terms are summed as exact fractions and only
the final sum is rounded up to a whole liter.
"""
from fractions import Fraction
import logging
import math

from ..conf import ledger_setting
from ..exceptions import ValidationError
from .stock_ledger import to_liters

logger = logging.getLogger(__name__)


def _field(subscription, name):
    if isinstance(subscription, dict):
        return subscription.get(name)
    return getattr(subscription, name, None)


def frequency_divisor(frequency):
    divisors = {
        'daily': 1,
        'weekly': ledger_setting('WEEKLY_DIVISOR'),
        'monthly': ledger_setting('MONTHLY_DIVISOR'),
    }
    try:
        return Fraction(divisors[frequency])
    except KeyError:
        raise ValidationError(f"Unknown subscription frequency: {frequency!r}", frequency=frequency)


def exact_daily_demand(subscriptions):
    """Unrounded liters/day of the active subscriptions."""
    total = Fraction(0)
    for subscription in subscriptions:
        status = _field(subscription, 'status') or 'active'
        if status != 'active':
            continue
        quantity = to_liters(_field(subscription, 'quantity'))
        if quantity < 0:
            raise ValidationError("Subscription quantity cannot be negative", quantity=str(quantity))
        total += Fraction(quantity) / frequency_divisor(_field(subscription, 'frequency'))
    return total


def daily_demand(subscriptions):
    """Liters/day needed for ``subscriptions``, rounded up to a whole liter."""
    exact = exact_daily_demand(subscriptions)
    liters = math.ceil(exact)
    logger.debug(f"Daily subscription demand {exact} -> {liters}L")
    return liters
