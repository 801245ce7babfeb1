from datetime import timedelta
from decimal import Decimal
import logging

from django.db.models import Avg, Count, Max, Min, Sum
from django.utils import timezone

from ..conf import ledger_setting
from ..exceptions import ValidationError
from ..models import DailyStockArchive, MilkContribution

logger = logging.getLogger(__name__)


def _period(start_date=None, end_date=None, days=None):
    if start_date or end_date:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date",
                                  start_date=str(start_date), end_date=str(end_date))
        return start_date, end_date
    if days is None:
        days = ledger_setting('SUMMARY_DEFAULT_DAYS')
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise ValidationError("days must be a whole number", field='days')
    if days <= 0:
        raise ValidationError("days must be greater than zero", field='days')
    today = timezone.localdate()
    return today - timedelta(days=days), today


def _round(value):
    if value is None:
        return Decimal('0.00')
    return Decimal(value).quantize(Decimal('0.01'))


class InventoryReport:

    @staticmethod
    def archive(start_date=None, end_date=None):
        """Archived days in the range, newest first."""
        queryset = DailyStockArchive.objects.all()
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date",
                                  start_date=str(start_date), end_date=str(end_date))
        if start_date:
            queryset = queryset.filter(date__gte=start_date)
        if end_date:
            queryset = queryset.filter(date__lte=end_date)
        return queryset.order_by('-date')

    @staticmethod
    def summary(days=None, start_date=None, end_date=None):
        start_date, end_date = _period(start_date, end_date, days)
        stats = InventoryReport.archive(start_date, end_date).aggregate(
            avg_total_stock=Avg('total_stock'),
            min_total_stock=Min('total_stock'),
            max_total_stock=Max('total_stock'),
            avg_subscription_demand=Avg('subscription_demand'),
            avg_leftover=Avg('closing_leftover'),
            days=Count('id'),
        )
        return {
            'start_date': start_date,
            'end_date': end_date,
            'avg_total_stock': _round(stats['avg_total_stock']),
            'min_total_stock': _round(stats['min_total_stock']),
            'max_total_stock': _round(stats['max_total_stock']),
            'avg_subscription_demand': _round(stats['avg_subscription_demand']),
            'avg_leftover': _round(stats['avg_leftover']),
            'days': stats['days'],
        }

    @staticmethod
    def daily_contribution_totals(days=30):
        """Admitted liters per delivery day, oldest first."""
        start_date, _ = _period(days=days)
        rows = (
            MilkContribution.objects
            .filter(decision='admit', contribution_date__gte=start_date)
            .values('contribution_date')
            .annotate(total_liters=Sum('quantity'), contributions=Count('id'))
            .order_by('contribution_date')
        )
        return [
            {
                'date': row['contribution_date'],
                'total_liters': row['total_liters'] or Decimal('0.00'),
                'contributions': row['contributions'],
            }
            for row in rows
        ]
