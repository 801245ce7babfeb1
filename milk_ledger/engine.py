"""
Entry points of the milk stock ledger.

These are the calls the surrounding application makes: REST views, Celery
tasks and management commands all come through here. Each call runs inside
``store_errors()`` so a database outage surfaces as a retryable
StoreUnavailable rather than a raw driver error.
"""
import logging

from django.utils import timezone

from .exceptions import store_errors
from .models import Subscription
from .utils.archive_service import ArchiveService
from .utils.contribution_service import ContributionIntakeService
from .utils.demand_forecaster import daily_demand
from .utils.farmer_service import FarmerService
from .utils.inventory_report import InventoryReport
from .utils.payment_service import PaymentService
from .utils.pricing_service import PricingService
from .utils.reservation_service import ReservationService
from .utils.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


def submit_contribution(farmer_id, milk_type, quantity, quality_rating=None, recorded_by=None):
    with store_errors():
        return ContributionIntakeService.submit(
            farmer_id, milk_type, quantity, quality_rating, recorded_by=recorded_by,
        )


def get_today_summary():
    return get_stock_summary(timezone.localdate())


def get_stock_summary(date):
    with store_errors():
        return StockLedgerService.summary(date)


def get_archive(start_date=None, end_date=None):
    with store_errors():
        return list(InventoryReport.archive(start_date, end_date))


def get_inventory_summary(days=None, start_date=None, end_date=None):
    with store_errors():
        return InventoryReport.summary(days=days, start_date=start_date, end_date=end_date)


def daily_contribution_totals(days=30):
    with store_errors():
        return InventoryReport.daily_contribution_totals(days)


def recompute_daily_demand(subscriptions=None, date=None):
    """
    Forecast liters/day from ``subscriptions`` (all active subscriptions when
    omitted). With ``date`` the figure is stored on that day's record.
    """
    with store_errors():
        if subscriptions is None:
            subscriptions = Subscription.objects.filter(status='active')
        liters = daily_demand(subscriptions)
        if date is not None:
            StockLedgerService.set_subscription_demand(date, liters)
            logger.info(f"Subscription demand for {date} set to {liters}L")
        return liters


def reserve_for_subscriptions(date, amount, reservation_type=None, source_date=None):
    with store_errors():
        return ReservationService.reserve_for_date(date, amount, reservation_type, source_date)


def archive_and_reset_daily(date):
    with store_errors():
        return ArchiveService.archive_and_roll(date)


def debit_sale(date, quantity, override=False):
    with store_errors():
        return StockLedgerService.debit(date, quantity, override=override)


def check_stock_availability(quantity, date=None):
    with store_errors():
        return StockLedgerService.is_available(date or timezone.localdate(), quantity)


def list_prices():
    with store_errors():
        return PricingService.list_prices()


def update_prices(prices):
    with store_errors():
        return PricingService.update_prices(prices)


def approve_payment(payment, reviewed_by=None, notes=''):
    with store_errors():
        return PaymentService.approve(payment, reviewed_by, notes)


def reject_payment(payment, reviewed_by=None, reason=''):
    with store_errors():
        return PaymentService.reject(payment, reviewed_by, reason)


def pending_payments_summary():
    with store_errors():
        return PaymentService.pending_summary()


def reinstate_farmer(farmer_id, reviewed_by=None, notes=''):
    with store_errors():
        farmer = FarmerService.resolve(farmer_id)
        return FarmerService.reinstate(farmer, reviewed_by, notes)
