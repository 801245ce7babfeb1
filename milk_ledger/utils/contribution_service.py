"""
ContributionIntakeService records a farmer's milk delivery.

The quality decision, the pending payment and the contribution row commit
together. The ledger credit runs after that commit: the delivery already
happened, so a failed credit is reported as InventoryOutOfSync alongside the
saved records instead of undoing them.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..exceptions import InventoryOutOfSync, ValidationError
from ..models import Farmer, FarmerPayment, MilkContribution
from .farmer_service import FarmerService
from .payment_service import PaymentService
from .quality_service import QualityDecision, QualityEnforcer
from .stock_ledger import StockLedgerService, to_positive_liters

logger = logging.getLogger(__name__)


@dataclass
class IntakeResult:
    decision: QualityDecision
    contribution: MilkContribution
    payment: Optional[FarmerPayment] = None
    warning: Optional[InventoryOutOfSync] = None

    @property
    def admitted(self):
        return self.decision.admitted

    @property
    def suspended(self):
        return self.decision.suspended

    @property
    def message(self):
        if self.warning:
            return self.warning.message
        return self.decision.message()


def validate_rating(quality_rating):
    if quality_rating is None or quality_rating == '':
        return None
    try:
        rating = int(quality_rating)
    except (TypeError, ValueError):
        raise ValidationError("quality_rating must be 1, 2 or 3", field='quality_rating')
    valid = {value for value, _ in MilkContribution.QUALITY_CHOICES}
    if isinstance(quality_rating, bool) or rating not in valid or str(rating) != str(quality_rating).strip():
        raise ValidationError("quality_rating must be 1, 2 or 3", field='quality_rating')
    return rating


class ContributionIntakeService:

    @staticmethod
    def submit(farmer_id, milk_type, quantity, quality_rating=None, recorded_by=None, contribution_date=None):
        """
        Run a delivery through quality enforcement and, when admitted, issue
        the pending payment and credit the day's stock.
        """
        quantity = to_positive_liters(quantity)
        quality_rating = validate_rating(quality_rating)
        milk_type = (milk_type or 'cow').strip().lower()
        contribution_date = contribution_date or timezone.localdate()

        farmer = FarmerService.resolve(farmer_id)
        FarmerService.ensure_can_contribute(farmer)

        with transaction.atomic():
            # Serialises submissions per farmer so the streak is read consistently.
            farmer = Farmer.objects.select_for_update().get(pk=farmer.pk)
            FarmerService.ensure_can_contribute(farmer)
            decision = QualityEnforcer.evaluate(farmer, quality_rating)

            payment = None
            if decision.admitted:
                payment = PaymentService.issue_for_collection(farmer, milk_type, quantity, contribution_date)

            contribution = MilkContribution.objects.create(
                farmer=farmer,
                milk_type=milk_type,
                quantity=quantity if decision.admitted else 0,
                submitted_quantity=quantity,
                quality_rating=quality_rating,
                decision=decision.outcome,
                substandard_streak=decision.streak,
                contribution_date=contribution_date,
                payment=payment,
                recorded_by=recorded_by,
            )

            if decision.suspended:
                QualityEnforcer.suspend_farmer(farmer, decision.streak)

        if not decision.admitted:
            logger.info(
                f"Recorded {decision.outcome} contribution {contribution.id} from farmer {farmer.farmer_code}: "
                f"{quantity}L {milk_type} not added to stock"
            )
            return IntakeResult(decision=decision, contribution=contribution)

        try:
            StockLedgerService.credit(contribution_date, quantity)
        except DatabaseError as exc:
            warning = InventoryOutOfSync(
                f"Contribution {contribution.id} and payment {payment.id} were recorded but "
                f"{quantity}L could not be added to the stock for {contribution_date}",
                contribution_id=contribution.id,
                payment_id=payment.id,
                quantity=str(quantity),
                date=str(contribution_date),
            )
            logger.error(f"{warning.message}: {exc}", exc_info=True)
            return IntakeResult(decision=decision, contribution=contribution, payment=payment, warning=warning)

        logger.info(
            f"Admitted contribution {contribution.id}: {quantity}L {milk_type} from farmer {farmer.farmer_code}"
        )
        return IntakeResult(decision=decision, contribution=contribution, payment=payment)
