"""
ReservationService records forward claims on a future day's stock.

A reservation only writes the StockReservation row. The claimed liters are
taken out of the target day's opening balance by the archive run, because a
reservation may be revised several times before its day arrives. A
reservation made after that day has already been opened is folded into its
record straight away.
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..conf import ledger_setting
from ..exceptions import ReservationUnderfunded, ValidationError
from ..models import DailyStockArchive, DailyStockRecord, StockReservation
from .stock_ledger import StockLedgerService, to_positive_liters

logger = logging.getLogger(__name__)


@dataclass
class ReservationResult:
    reserved: bool
    reservation: Optional[StockReservation] = None
    created: bool = False
    warning: Optional[ReservationUnderfunded] = None
    applied: bool = False

    @property
    def reason(self):
        return self.warning.message if self.warning else None


@dataclass
class AppliedReservations:
    record: DailyStockRecord
    reserved_total: Decimal
    held_back: Decimal


class ReservationService:

    @staticmethod
    def reserve_for_date(date, amount, reservation_type=None, source_date=None):
        """
        Reserve ``amount`` liters on ``date`` funded from ``source_date``
        (the day before ``date`` unless given).

        Returns a ReservationResult; an underfunded request is a warning, not
        an exception, and leaves the reservation table untouched.
        """
        reservation_type = reservation_type or ledger_setting('DEFAULT_RESERVATION_TYPE')
        valid_types = {choice for choice, _ in StockReservation.TYPE_CHOICES}
        if reservation_type not in valid_types:
            raise ValidationError(f"Unknown reservation type: {reservation_type!r}", reservation_type=reservation_type)
        amount = to_positive_liters(amount, 'amount')
        if source_date is None:
            source_date = date - timedelta(days=1)
        if date <= source_date:
            raise ValidationError("Reservations must be for a day after the funding day",
                                  reservation_date=str(date), source_date=str(source_date))

        with transaction.atomic():
            if DailyStockArchive.objects.filter(date=date).exists():
                raise ValidationError(f"Stock for {date} is already closed", reservation_date=str(date))

            source_total = (
                DailyStockRecord.objects
                .filter(date=source_date)
                .values_list('total_stock', flat=True)
                .first()
            ) or 0
            if amount > source_total:
                warning = ReservationUnderfunded(
                    f"Not enough milk stock to reserve {amount}L for {date}: "
                    f"{source_total}L collected on {source_date}",
                    requested=str(amount),
                    source_total=str(source_total),
                )
                logger.warning(warning.message)
                return ReservationResult(reserved=False, warning=warning)

            existing = (
                StockReservation.objects.select_for_update()
                .filter(reservation_date=date, reservation_type=reservation_type)
                .first()
            )
            if existing is not None and existing.applied_at is not None:
                raise ValidationError(
                    f"The {reservation_type} reservation for {date} was already applied to that day's opening stock",
                    reservation_date=str(date),
                )
            reservation, created = StockReservation.objects.update_or_create(
                reservation_date=date,
                reservation_type=reservation_type,
                defaults={
                    'reserved_amount': amount,
                    'source_date': source_date,
                    'updated_at': timezone.now(),
                },
            )

            # The archive run that seeds ``date`` has already happened.
            applied = DailyStockArchive.objects.filter(date=date - timedelta(days=1)).exists()
            if applied:
                ReservationService.apply_pending(date)
                reservation.refresh_from_db()

        logger.info(
            f"{'Created' if created else 'Replaced'} {reservation_type} reservation of {amount}L for {date} "
            f"(funded from {source_date}{', applied to the open day' if applied else ''})"
        )
        return ReservationResult(reserved=True, reservation=reservation, created=created, applied=applied)

    @staticmethod
    def pending_for_date(date):
        return StockReservation.objects.filter(reservation_date=date, applied_at__isnull=True)

    @staticmethod
    def apply_pending(date, carried_in=None):
        """
        Fold the unapplied reservations for ``date`` into its record.

        ``carried_in`` is the opening balance the archive run brings forward
        from the day before. The full reserved amount goes to
        subscription_demand; only what the available stock covers is held
        back as reserved_stock. Must run inside a transaction.
        """
        StockLedgerService.get_or_create_record(date)
        record = DailyStockRecord.objects.select_for_update().get(date=date)
        carried = carried_in if carried_in is not None else Decimal('0.00')

        reservations = list(ReservationService.pending_for_date(date).select_for_update())
        reserved_total = sum((r.reserved_amount for r in reservations), Decimal('0.00'))
        # Never hold back more than the opening balance can cover.
        capacity = max(record.available_stock + carried, Decimal('0.00'))
        held_back = min(reserved_total, capacity)

        changes = {
            'total_stock': F('total_stock') + carried,
            'available_stock': F('available_stock') + carried - held_back,
            'reserved_stock': F('reserved_stock') + held_back,
            'subscription_demand': F('subscription_demand') + reserved_total,
            'updated_at': timezone.now(),
        }
        if carried_in is not None:
            changes['leftover_milk'] = carried_in
        DailyStockRecord.objects.filter(pk=record.pk).update(**changes)
        StockReservation.objects.filter(pk__in=[r.pk for r in reservations]).update(
            applied_at=timezone.now(),
            updated_at=timezone.now(),
        )
        record.refresh_from_db()

        if held_back < reserved_total:
            logger.warning(
                f"Reservations for {date} total {reserved_total}L but only {held_back}L could be held back"
            )
        return AppliedReservations(record=record, reserved_total=reserved_total, held_back=held_back)
