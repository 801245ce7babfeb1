"""
REST endpoints under /api/v1/milk/.
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import User
from django.db import OperationalError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from milk_ledger.models import DailyStockArchive, DailyStockRecord, FarmerPayment, StockReservation, Subscription
from milk_ledger.utils.stock_ledger import StockLedgerService

from .helpers import make_admin, make_farmer, make_prices, make_staff


class ContributionAPITests(APITestCase):

    def setUp(self):
        make_prices()
        self.farmer = make_farmer('10001')
        self.staff = make_staff()
        self.client.force_authenticate(user=self.staff)
        self.url = reverse('milk-contributions')

    def test_submit_admitted(self):
        response = self.client.post(self.url, {'farmer_id': '10001', 'milk_type': 'cow', 'quantity': '10', 'quality_rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['admitted'])
        self.assertEqual(response.data['decision'], 'admit')
        self.assertEqual(response.data['payment']['amount'], '450.00')
        self.assertEqual(response.data['payment']['status'], 'pending')
        self.assertIsNone(response.data['warning'])

    def test_submit_substandard(self):
        response = self.client.post(self.url, {'farmer_id': '10001', 'quantity': '10', 'quality_rating': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['admitted'])
        self.assertEqual(response.data['decision'], 'warn')
        self.assertEqual(response.data['contribution']['quantity'], '0.00')
        self.assertIsNone(response.data['payment'])

    def test_suspended_farmer_gets_403(self):
        self.farmer.status = 'blocked'
        self.farmer.save()
        response = self.client.post(self.url, {'farmer_id': '10001', 'quantity': '10', 'quality_rating': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error_type'], 'FarmerSuspended')

    def test_unknown_farmer(self):
        response = self.client.post(self.url, {'farmer_id': '55555', 'quantity': '10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error_type'], 'FarmerNotFound')
        self.assertFalse(response.data['retryable'])

    def test_invalid_payload(self):
        response = self.client.post(self.url, {'farmer_id': '10001', 'quantity': '-2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)

    def test_non_staff_cannot_submit(self):
        user = User.objects.create_user(username='customer', password='testpass123')
        self.client.force_authenticate(user=user)
        response = self.client.post(self.url, {'farmer_id': '10001', 'quantity': '10'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filtered_by_farmer_code(self):
        make_farmer('20002')
        self.client.post(self.url, {'farmer_id': '10001', 'quantity': '10', 'quality_rating': 1}, format='json')
        self.client.post(self.url, {'farmer_id': '20002', 'quantity': '4', 'quality_rating': 2}, format='json')
        response = self.client.get(self.url, {'farmer_code': '20002'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['farmer_code'], '20002')


class StockAPITests(APITestCase):

    def setUp(self):
        self.staff = make_staff()
        self.admin = make_admin()
        self.client.force_authenticate(user=self.staff)
        self.today = timezone.localdate()
        StockLedgerService.credit(self.today, '100')

    def test_today_summary(self):
        response = self.client.get(reverse('stock-today'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_stock'], '100.00')
        self.assertEqual(response.data['leftover_from_yesterday'], '0.00')

    def test_summary_for_date(self):
        response = self.client.get(reverse('stock-for-date', args=['2020-01-01']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_stock'], '0.00')
        response = self.client.get(reverse('stock-for-date', args=['yesterday']))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_debit(self):
        response = self.client.post(reverse('stock-debit'), {'quantity': '25'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['ok'])
        self.assertEqual(response.data['summary']['available_stock'], '75.00')

    def test_debit_insufficient(self):
        response = self.client.post(reverse('stock-debit'), {'quantity': '150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error_type'], 'InsufficientStock')

    def test_override_is_admin_only(self):
        response = self.client.post(reverse('stock-debit'), {'quantity': '150', 'override': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('stock-debit'), {'quantity': '150', 'override': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['available_stock'], '-50.00')

    def test_availability(self):
        response = self.client.get(reverse('stock-availability'), {'quantity': '60'})
        self.assertTrue(response.data['available'])
        response = self.client.get(reverse('stock-availability'), {'quantity': '160'})
        self.assertFalse(response.data['available'])
        response = self.client.get(reverse('stock-availability'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_store_outage_is_retryable(self):
        with mock.patch.object(StockLedgerService, 'summary', side_effect=OperationalError('connection refused')):
            response = self.client.get(reverse('stock-today'))
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertTrue(response.data['retryable'])
        self.assertEqual(response.data['error_type'], 'StoreUnavailable')

    def test_manual_archive(self):
        url = reverse('stock-archive')
        response = self.client.post(url, {'date': self.today.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(url, {'date': self.today.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['archived'])
        self.assertEqual(response.data['leftover'], Decimal('100.00'))

        response = self.client.post(url, {'date': self.today.isoformat()}, format='json')
        self.assertFalse(response.data['archived'])
        self.assertIn('already archived', response.data['reason'])

        response = self.client.get(url)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['date'], self.today.isoformat())

    def test_inventory_summary(self):
        for offset, total in ((2, '80'), (3, '120')):
            DailyStockArchive.objects.create(
                date=self.today - timedelta(days=offset),
                total_stock=Decimal(total),
                closing_leftover=Decimal('10'),
                subscription_demand=Decimal('30'),
            )
        response = self.client.get(reverse('stock-inventory-summary'), {'days': 7})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['days'], 2)
        self.assertEqual(response.data['avg_total_stock'], '100.00')
        self.assertEqual(response.data['min_total_stock'], '80.00')
        self.assertEqual(response.data['max_total_stock'], '120.00')
        self.assertEqual(response.data['avg_leftover'], '10.00')

        response = self.client.get(reverse('stock-inventory-summary'), {'days': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DemandAndReservationAPITests(APITestCase):

    def setUp(self):
        self.staff = make_staff()
        self.client.force_authenticate(user=self.staff)
        self.today = timezone.localdate()
        StockLedgerService.credit(self.today, '100')

    def test_recompute_from_payload(self):
        payload = {'subscriptions': [
            {'quantity': '10', 'frequency': 'daily'},
            {'quantity': '70', 'frequency': 'weekly'},
            {'quantity': '300', 'frequency': 'monthly'},
        ]}
        response = self.client.post(reverse('demand-recompute'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['daily_demand'], 30)
        record = DailyStockRecord.objects.get(date=self.today)
        self.assertEqual(record.subscription_demand, Decimal('30.00'))

    def test_recompute_from_active_subscriptions(self):
        Subscription.objects.create(customer=self.staff, quantity=Decimal('3'), frequency='daily')
        Subscription.objects.create(customer=self.staff, quantity=Decimal('5'), frequency='daily', status='cancelled')
        response = self.client.post(reverse('demand-recompute'), {}, format='json')
        self.assertEqual(response.data['daily_demand'], 3)

    def test_underfunded_reservation(self):
        tomorrow = self.today + timedelta(days=1)
        response = self.client.post(reverse('stock-reservations'), {'date': tomorrow.isoformat(), 'amount': '150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['reserved'])
        self.assertEqual(response.data['warning']['error_type'], 'ReservationUnderfunded')
        self.assertFalse(StockReservation.objects.exists())

    def test_reserve_and_list(self):
        tomorrow = self.today + timedelta(days=1)
        url = reverse('stock-reservations')
        response = self.client.post(url, {'date': tomorrow.isoformat(), 'amount': '40'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(url, {'date': tomorrow.isoformat(), 'amount': '45'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['created'])

        response = self.client.get(url)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['reserved_amount'], '45.00')


class AdminAPITests(APITestCase):

    def setUp(self):
        make_prices()
        self.admin = make_admin()
        self.staff = make_staff()
        self.farmer = make_farmer('10001')
        self.client.force_authenticate(user=self.staff)
        self.client.post(reverse('milk-contributions'), {'farmer_id': '10001', 'quantity': '10', 'quality_rating': 1}, format='json')
        self.payment = FarmerPayment.objects.get()

    def test_pricing(self):
        response = self.client.get(reverse('milk-pricing'))
        self.assertEqual([p['milk_type'] for p in response.data], ['buffalo', 'cow'])

        response = self.client.patch(reverse('milk-pricing'), {'prices': {'cow': '48.00'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(reverse('milk-pricing'), {'prices': {'cow': '48.00'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[1]['price_per_liter'], '48.00')

    def test_payment_review(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('payments-pending-summary'))
        self.assertEqual(response.data[0]['farmer_id'], '10001')
        self.assertEqual(response.data[0]['total_liters'], '10.00')

        url = reverse('payment-approve', args=[self.payment.id])
        response = self.client.post(url, {'notes': 'ok'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertEqual(response.data['reviewed_by_name'], self.admin.username)

        response = self.client.post(reverse('payment-reject', args=[self.payment.id]), {'reason': 'late'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error_type'], 'InvalidPaymentTransition')

        response = self.client.post(reverse('payment-approve', args=[9999]), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_staff_cannot_review_payments(self):
        response = self.client.post(reverse('payment-approve', args=[self.payment.id]), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reinstate(self):
        self.farmer.status = 'blocked'
        self.farmer.suspended_at = timezone.now()
        self.farmer.save()
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('farmer-reinstate', args=['10001']), {'notes': 'retest passed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertIsNone(response.data['suspended_at'])

    def test_health_needs_no_login(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('health-check'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'healthy')


class InvalidHostTests(APITestCase):

    def test_unknown_host_gets_plain_400(self):
        response = self.client.get(reverse('health-check'), HTTP_HOST='evil.example.com')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.content, b'Invalid HTTP_HOST header')
