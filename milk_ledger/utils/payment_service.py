"""
PaymentService issues pending payment obligations for admitted milk and
handles the reviewer's approve / reject decision.
"""
from decimal import Decimal
import logging

from django.db import transaction
from django.db.models import Count, Max, Sum
from django.utils import timezone

from ..exceptions import InvalidPaymentTransition, ValidationError
from ..models import FarmerPayment, MilkContribution
from .pricing_service import PricingService

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    def issue_for_collection(farmer, milk_type, quantity, collection_date):
        """Create the pending payment for ``quantity`` liters at today's price."""
        price = PricingService.get_price(milk_type)
        amount = (quantity * price).quantize(Decimal('0.01'))
        payment = FarmerPayment.objects.create(
            farmer=farmer,
            amount=amount,
            status='pending',
            notes=f"Payment for {quantity}L of {milk_type} milk collection on {collection_date:%b %d, %Y}",
        )
        logger.info(f"Issued pending payment {payment.id} of {amount} to farmer {farmer.farmer_code}")
        return payment

    @staticmethod
    def _review(payment, new_status, reviewed_by, notes):
        with transaction.atomic():
            payment = FarmerPayment.objects.select_for_update().get(pk=payment.pk)
            if payment.status != 'pending':
                raise InvalidPaymentTransition(
                    f"Payment {payment.id} is already {payment.status}",
                    payment_id=payment.id,
                    status=payment.status,
                )
            payment.status = new_status
            payment.reviewed_by = reviewed_by
            payment.reviewed_at = timezone.now()
            payment.review_notes = notes or None
            payment.save(update_fields=['status', 'reviewed_by', 'reviewed_at', 'review_notes', 'updated_at'])
        logger.info(
            f"Payment {payment.id} for farmer {payment.farmer.farmer_code} {new_status} "
            f"by {reviewed_by.username if reviewed_by else 'system'}"
        )
        return payment

    @staticmethod
    def approve(payment, reviewed_by=None, notes=''):
        return PaymentService._review(payment, 'approved', reviewed_by, notes)

    @staticmethod
    def reject(payment, reviewed_by=None, reason=''):
        if not reason or not str(reason).strip():
            raise ValidationError("A reason is required to reject a payment", field='reason')
        return PaymentService._review(payment, 'rejected', reviewed_by, reason)

    @staticmethod
    def pending_summary():
        """Per farmer: pending payment count, liters and amount covered, last delivery."""
        payments = (
            FarmerPayment.objects.filter(status='pending')
            .values('farmer_id', 'farmer__farmer_code', 'farmer__name')
            .annotate(payment_count=Count('id'), total_amount=Sum('amount'))
            .order_by('farmer__farmer_code')
        )
        liters = {
            row['farmer_id']: row
            for row in (
                MilkContribution.objects.filter(payment__status='pending')
                .values('farmer_id')
                .annotate(total_liters=Sum('quantity'), last_contribution=Max('contribution_date'))
            )
        }
        summary = []
        for row in payments:
            contribution_row = liters.get(row['farmer_id'], {})
            summary.append({
                'farmer_id': row['farmer__farmer_code'],
                'farmer_name': row['farmer__name'],
                'payment_count': row['payment_count'],
                'total_amount': row['total_amount'] or Decimal('0.00'),
                'total_liters': contribution_row.get('total_liters') or Decimal('0.00'),
                'last_contribution': contribution_row.get('last_contribution'),
            })
        return summary
