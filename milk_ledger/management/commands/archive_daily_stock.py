from datetime import timedelta
import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date

from milk_ledger import engine
from milk_ledger.models import DailyStockArchive, DailyStockRecord, StockReservation

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Archive a day of milk stock and carry its leftover into the next day'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Day to archive as YYYY-MM-DD (default: yesterday)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be archived without changing anything',
        )

    def handle(self, *args, **options):
        if options['date']:
            try:
                day = parse_date(options['date'])
            except ValueError:
                day = None
            if day is None:
                raise CommandError(f"Invalid date '{options['date']}', expected YYYY-MM-DD")
        else:
            day = timezone.localdate() - timedelta(days=1)

        if options['dry_run']:
            self._describe(day)
            return

        result = engine.archive_and_reset_daily(day)
        if not result.archived:
            self.stdout.write(self.style.WARNING(result.reason))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Archived stock for {day}: total {result.archive.total_stock}L, "
                f"leftover {result.leftover}L carried to {result.next_record.date}"
            )
        )
        if result.reservations_applied:
            self.stdout.write(f"  - Reservations applied to {result.next_record.date}: {result.reservations_applied}L")

    def _describe(self, day):
        self.stdout.write(self.style.WARNING(f"DRY RUN: archiving stock for {day}"))
        if DailyStockArchive.objects.filter(date=day).exists():
            self.stdout.write(f"{day} is already archived; nothing would change.")
            return

        record = DailyStockRecord.objects.filter(date=day).first()
        if record is None:
            self.stdout.write(f"No stock recorded for {day}; an empty archive would be written.")
        else:
            self.stdout.write(
                f"  - Total {record.total_stock}L, sold {record.sold_stock}L, available {record.available_stock}L"
            )
        pending = StockReservation.objects.filter(
            reservation_date=day + timedelta(days=1), applied_at__isnull=True,
        ).count()
        self.stdout.write(f"  - Pending reservations for {day + timedelta(days=1)}: {pending}")
