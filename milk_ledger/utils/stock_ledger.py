"""
StockLedgerService owns every mutation of DailyStockRecord.

Credits and debits are single UPDATE statements built from F() expressions,
so concurrent collections and sales on the same day never lose updates. A
debit that must not overdraw the day is a conditional UPDATE
(``available_stock >= quantity``) and fails when no row matched.
"""
from decimal import Decimal, InvalidOperation
import logging

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import InsufficientStock, ValidationError
from ..models import DailyStockArchive, DailyStockRecord

logger = logging.getLogger(__name__)


def to_liters(value, field='quantity'):
    """Validate and normalise a liter amount coming from a caller."""
    if isinstance(value, bool) or value is None or value == '':
        raise ValidationError(f"{field} is required", field=field)
    try:
        liters = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not liters.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    return liters.quantize(Decimal('0.01'))


def to_positive_liters(value, field='quantity'):
    liters = to_liters(value, field)
    if liters <= 0:
        raise ValidationError(f"{field} must be greater than zero", field=field)
    return liters


def _warn_if_closed(date, action, quantity):
    if DailyStockArchive.objects.filter(date=date).exists():
        logger.warning(
            f"{action} of {quantity}L on {date} after the day was archived; "
            f"the archive and the next day's opening balance no longer match it"
        )


class StockLedgerService:

    @staticmethod
    def get_or_create_record(date):
        """Return the live record for ``date``, creating an empty one if absent."""
        try:
            with transaction.atomic():
                record, created = DailyStockRecord.objects.get_or_create(date=date)
        except IntegrityError:
            # Lost the insert race to a concurrent request.
            record, created = DailyStockRecord.objects.get(date=date), False
        if created:
            logger.info(f"Opened stock record for {date}")
        return record

    @staticmethod
    def credit(date, quantity):
        """Add admitted milk to the day's total and available stock."""
        quantity = to_positive_liters(quantity)
        StockLedgerService.get_or_create_record(date)
        DailyStockRecord.objects.filter(date=date).update(
            total_stock=F('total_stock') + quantity,
            available_stock=F('available_stock') + quantity,
            updated_at=timezone.now(),
        )
        record = DailyStockRecord.objects.get(date=date)
        _warn_if_closed(date, 'Credit', quantity)
        logger.info(f"Credited {quantity}L to {date}: total={record.total_stock} available={record.available_stock}")
        return record

    @staticmethod
    def debit(date, quantity, override=False):
        """
        Record a sale against the day's stock.

        Without ``override`` the debit is refused with InsufficientStock when
        it would take available_stock below zero. ``override`` is reserved
        for emergency admin corrections.
        """
        quantity = to_positive_liters(quantity)
        StockLedgerService.get_or_create_record(date)
        rows = DailyStockRecord.objects.filter(date=date)
        if not override:
            rows = rows.filter(available_stock__gte=quantity)
        updated = rows.update(
            sold_stock=F('sold_stock') + quantity,
            available_stock=F('available_stock') - quantity,
            updated_at=timezone.now(),
        )
        record = DailyStockRecord.objects.get(date=date)
        if updated:
            _warn_if_closed(date, 'Sale', quantity)
        if not updated:
            logger.warning(f"Refused debit of {quantity}L on {date}: only {record.available_stock}L available")
            raise InsufficientStock(
                f"Insufficient stock on {date}: requested {quantity}L, available {record.available_stock}L",
                requested=str(quantity),
                available=str(record.available_stock),
            )
        if override and record.available_stock < 0:
            logger.warning(f"Override debit of {quantity}L on {date} left available stock at {record.available_stock}L")
        else:
            logger.info(f"Debited {quantity}L from {date}: sold={record.sold_stock} available={record.available_stock}")
        return record

    @staticmethod
    def set_subscription_demand(date, liters):
        StockLedgerService.get_or_create_record(date)
        DailyStockRecord.objects.filter(date=date).update(
            subscription_demand=to_liters(liters, 'subscription_demand'),
            updated_at=timezone.now(),
        )
        return DailyStockRecord.objects.get(date=date)

    @staticmethod
    def summary(date):
        """Read-only view of the day; a missing day reads as all zeros."""
        record = DailyStockRecord.objects.filter(date=date).first()
        if record is None:
            record = DailyStockRecord(date=date)
        return record.summary()

    @staticmethod
    def is_available(date, quantity):
        quantity = to_positive_liters(quantity)
        return DailyStockRecord.objects.filter(date=date, available_stock__gte=quantity).exists()
