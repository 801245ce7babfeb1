from decimal import Decimal

from django.test import TestCase

from milk_ledger.exceptions import (
    FarmerSuspended, InvalidPaymentTransition, PricingNotConfigured, ValidationError,
)
from milk_ledger.models import MilkPricing
from milk_ledger.utils.contribution_service import ContributionIntakeService
from milk_ledger.utils.farmer_service import FarmerService
from milk_ledger.utils.payment_service import PaymentService
from milk_ledger.utils.pricing_service import PricingService

from .helpers import make_admin, make_farmer, make_prices


class PaymentReviewTests(TestCase):

    def setUp(self):
        make_prices()
        self.admin = make_admin()
        self.farmer = make_farmer('10001')
        self.payment = ContributionIntakeService.submit('10001', 'cow', '10', 1).payment

    def test_approve(self):
        payment = PaymentService.approve(self.payment, self.admin, 'paid in cash')
        self.assertEqual(payment.status, 'approved')
        self.assertEqual(payment.reviewed_by, self.admin)
        self.assertIsNotNone(payment.reviewed_at)
        self.assertEqual(payment.review_notes, 'paid in cash')

    def test_reject_needs_reason(self):
        with self.assertRaises(ValidationError):
            PaymentService.reject(self.payment, self.admin, '  ')
        payment = PaymentService.reject(self.payment, self.admin, 'duplicate entry')
        self.assertEqual(payment.status, 'rejected')

    def test_reviewed_payment_cannot_change(self):
        PaymentService.approve(self.payment, self.admin)
        with self.assertRaises(InvalidPaymentTransition):
            PaymentService.reject(self.payment, self.admin, 'changed my mind')
        with self.assertRaises(InvalidPaymentTransition):
            PaymentService.approve(self.payment, self.admin)

    def test_pending_summary(self):
        ContributionIntakeService.submit('10001', 'cow', '5.5', 2)
        make_farmer('20002')
        ContributionIntakeService.submit('20002', 'buffalo', '2', 1)
        PaymentService.approve(self.payment, self.admin)

        summary = PaymentService.pending_summary()
        self.assertEqual([row['farmer_id'] for row in summary], ['10001', '20002'])
        first = summary[0]
        self.assertEqual(first['payment_count'], 1)
        self.assertEqual(first['total_liters'], Decimal('5.50'))
        self.assertEqual(first['total_amount'], Decimal('247.50'))
        self.assertEqual(summary[1]['total_amount'], Decimal('120.00'))


class PricingTests(TestCase):

    def setUp(self):
        make_prices()

    def test_get_price(self):
        self.assertEqual(PricingService.get_price('cow'), Decimal('45.00'))
        with self.assertRaises(PricingNotConfigured):
            PricingService.get_price('goat')

    def test_update_prices(self):
        PricingService.update_prices({'cow': '50', 'buffalo': 62.5})
        self.assertEqual(MilkPricing.objects.get(milk_type='cow').price_per_liter, Decimal('50.00'))
        self.assertEqual(MilkPricing.objects.get(milk_type='buffalo').price_per_liter, Decimal('62.50'))

    def test_update_is_all_or_nothing(self):
        with self.assertRaises(PricingNotConfigured):
            PricingService.update_prices({'cow': '50', 'camel': '90'})
        with self.assertRaises(ValidationError):
            PricingService.update_prices({'cow': '-1'})
        self.assertEqual(MilkPricing.objects.get(milk_type='cow').price_per_liter, Decimal('45.00'))

    def test_seed_defaults_is_idempotent(self):
        self.assertEqual(PricingService.seed_defaults(), ['goat'])
        self.assertEqual(PricingService.seed_defaults(), [])
        self.assertEqual(MilkPricing.objects.count(), 3)


class FarmerReinstatementTests(TestCase):

    def setUp(self):
        make_prices()
        self.farmer = make_farmer('10001')

    def test_reinstate_suspended_farmer(self):
        for _ in range(3):
            ContributionIntakeService.submit('10001', 'cow', '10', 3)
        with self.assertRaises(FarmerSuspended):
            ContributionIntakeService.submit('10001', 'cow', '10', 1)

        farmer = FarmerService.reinstate(FarmerService.resolve('10001'), notes='lab retest passed')
        self.assertEqual(farmer.status, 'approved')
        self.assertIsNone(farmer.suspended_at)
        self.assertTrue(ContributionIntakeService.submit('10001', 'cow', '10', 1).admitted)

    def test_only_suspended_farmers_can_be_reinstated(self):
        with self.assertRaises(ValidationError):
            FarmerService.reinstate(self.farmer)
