from datetime import date
from decimal import Decimal

from django.test import TestCase

from milk_ledger.exceptions import InsufficientStock, ValidationError
from milk_ledger.models import DailyStockRecord
from milk_ledger.utils.archive_service import ArchiveService
from milk_ledger.utils.stock_ledger import StockLedgerService, to_liters


class StockLedgerTests(TestCase):

    def setUp(self):
        self.day = date(2026, 3, 14)

    def test_credit_creates_record(self):
        record = StockLedgerService.credit(self.day, '100')
        self.assertEqual(record.total_stock, Decimal('100.00'))
        self.assertEqual(record.available_stock, Decimal('100.00'))
        self.assertEqual(record.subscription_demand, Decimal('0.00'))
        self.assertEqual(record.leftover_milk, Decimal('0.00'))

    def test_credits_accumulate(self):
        StockLedgerService.credit(self.day, '12.5')
        record = StockLedgerService.credit(self.day, '7.25')
        self.assertEqual(record.total_stock, Decimal('19.75'))
        self.assertEqual(DailyStockRecord.objects.filter(date=self.day).count(), 1)

    def test_credit_then_debit_restores_available(self):
        StockLedgerService.credit(self.day, '50')
        StockLedgerService.credit(self.day, '30')
        record = StockLedgerService.debit(self.day, '30')
        self.assertEqual(record.available_stock, Decimal('50.00'))
        self.assertEqual(record.sold_stock, Decimal('30.00'))
        self.assertTrue(record.is_consistent())

    def test_debit_refuses_to_overdraw(self):
        StockLedgerService.credit(self.day, '40')
        with self.assertRaises(InsufficientStock) as ctx:
            StockLedgerService.debit(self.day, '40.01')
        self.assertEqual(ctx.exception.details['available'], '40.00')
        record = DailyStockRecord.objects.get(date=self.day)
        self.assertEqual(record.available_stock, Decimal('40.00'))
        self.assertEqual(record.sold_stock, Decimal('0.00'))

    def test_debit_on_missing_day_is_refused(self):
        with self.assertRaises(InsufficientStock):
            StockLedgerService.debit(self.day, '1')

    def test_override_can_go_negative(self):
        StockLedgerService.credit(self.day, '10')
        record = StockLedgerService.debit(self.day, '15', override=True)
        self.assertEqual(record.available_stock, Decimal('-5.00'))
        self.assertEqual(record.sold_stock, Decimal('15.00'))

    def test_non_positive_quantities_rejected(self):
        for value in ('0', '-3', 'abc', None, ''):
            with self.assertRaises(ValidationError):
                StockLedgerService.credit(self.day, value)

    def test_summary_of_missing_day_is_zero(self):
        summary = StockLedgerService.summary(self.day)
        self.assertEqual(summary['total_stock'], Decimal('0.00'))
        self.assertEqual(summary['leftover_from_yesterday'], Decimal('0.00'))
        self.assertFalse(DailyStockRecord.objects.exists())

    def test_is_available(self):
        StockLedgerService.credit(self.day, '20')
        self.assertTrue(StockLedgerService.is_available(self.day, '20'))
        self.assertFalse(StockLedgerService.is_available(self.day, '20.01'))

    def test_to_liters_rounds_to_centiliters(self):
        self.assertEqual(to_liters('1.005'), Decimal('1.00'))
        self.assertEqual(to_liters(3), Decimal('3.00'))
        with self.assertRaises(ValidationError):
            to_liters(True)


class ClosedDayTests(TestCase):

    def setUp(self):
        self.day = date(2026, 3, 14)
        StockLedgerService.credit(self.day, '50')

    def test_open_day_changes_are_quiet(self):
        with self.assertNoLogs('milk_ledger.utils.stock_ledger', level='WARNING'):
            StockLedgerService.credit(self.day, '5')
            StockLedgerService.debit(self.day, '5')

    def test_changes_after_archive_are_flagged(self):
        ArchiveService.archive_and_roll(self.day)
        with self.assertLogs('milk_ledger.utils.stock_ledger', level='WARNING') as logs:
            StockLedgerService.credit(self.day, '5')
        self.assertIn('after the day was archived', logs.output[0])

        with self.assertLogs('milk_ledger.utils.stock_ledger', level='WARNING') as logs:
            StockLedgerService.debit(self.day, '10')
        self.assertIn('Sale of 10.00L', logs.output[0])
