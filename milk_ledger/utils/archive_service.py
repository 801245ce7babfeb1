"""
ArchiveService closes a day: it snapshots the live ledger row into
DailyStockArchive, carries the closing available stock into the next day's
opening balance and applies the next day's reservations.

The three steps run in one transaction and the archive row (unique per date)
is the idempotency guard: a second run for the same date finds it and does
nothing, and a run that crashed part way rolled back entirely.
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional
import logging

from django.db import IntegrityError, transaction

from ..exceptions import AlreadyArchived
from ..models import DailyStockArchive, DailyStockRecord
from .reservation_service import ReservationService
from .stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


@dataclass
class ArchiveResult:
    archived: bool
    date: object
    archive: Optional[DailyStockArchive] = None
    next_record: Optional[DailyStockRecord] = None
    leftover: Decimal = Decimal('0.00')
    reservations_applied: Decimal = Decimal('0.00')
    notice: Optional[AlreadyArchived] = None

    @property
    def reason(self):
        return self.notice.message if self.notice else None


def _already_archived(date):
    notice = AlreadyArchived(f"Nothing to archive: stock for {date} is already archived", date=str(date))
    logger.info(notice.message)
    return ArchiveResult(archived=False, date=date, notice=notice)


class ArchiveService:

    @staticmethod
    def archive_and_roll(date):
        """Archive ``date`` and seed ``date + 1``. Safe to call repeatedly."""
        if DailyStockArchive.objects.filter(date=date).exists():
            return _already_archived(date)

        next_date = date + timedelta(days=1)
        with transaction.atomic():
            StockLedgerService.get_or_create_record(date)
            record = DailyStockRecord.objects.select_for_update().get(date=date)
            leftover = max(record.available_stock, Decimal('0.00'))

            try:
                with transaction.atomic():
                    archive = DailyStockArchive.objects.create(
                        date=date,
                        total_stock=record.total_stock,
                        available_stock=record.available_stock,
                        sold_stock=record.sold_stock,
                        reserved_stock=record.reserved_stock,
                        subscription_demand=record.subscription_demand,
                        leftover_milk=record.leftover_milk,
                        closing_leftover=leftover,
                    )
            except IntegrityError:
                # A concurrent run archived the day first.
                return _already_archived(date)

            applied = ReservationService.apply_pending(next_date, carried_in=leftover)
            next_record = applied.record
            reserved_total = applied.reserved_total

        logger.info(
            f"Archived stock for {date} (total={archive.total_stock}L, leftover={leftover}L); "
            f"seeded {next_date} with {leftover}L and {reserved_total}L reserved demand"
        )
        return ArchiveResult(
            archived=True,
            date=date,
            archive=archive,
            next_record=next_record,
            leftover=leftover,
            reservations_applied=reserved_total,
        )
