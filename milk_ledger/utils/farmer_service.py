import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import FarmerNotFound, FarmerSuspended, ValidationError
from ..models import Farmer

logger = logging.getLogger(__name__)


class FarmerService:

    @staticmethod
    def resolve(reference):
        """
        Find a farmer by the short code printed on their card, falling back to
        the internal id.
        """
        if reference is None or str(reference).strip() == '':
            raise ValidationError("Farmer ID is required", field='farmer_id')
        reference = str(reference).strip()
        farmer = Farmer.objects.filter(farmer_code=reference).first()
        if farmer is None and reference.isdigit():
            farmer = Farmer.objects.filter(pk=int(reference)).first()
        if farmer is None:
            raise FarmerNotFound(f"Invalid Farmer ID: {reference}", farmer_id=reference)
        return farmer

    @staticmethod
    def ensure_can_contribute(farmer):
        if farmer.status == 'blocked':
            raise FarmerSuspended(
                f"Farmer {farmer.farmer_code} is suspended pending quality review",
                farmer_id=farmer.farmer_code,
                suspended_at=farmer.suspended_at.isoformat() if farmer.suspended_at else None,
            )
        if farmer.status != 'approved':
            raise ValidationError(
                f"Farmer {farmer.farmer_code} is not approved for milk collection (status: {farmer.status})",
                farmer_id=farmer.farmer_code,
            )

    @staticmethod
    def reinstate(farmer, reviewed_by=None, notes=''):
        """Lift a quality suspension after manual review."""
        with transaction.atomic():
            farmer = Farmer.objects.select_for_update().get(pk=farmer.pk)
            if farmer.status != 'blocked':
                raise ValidationError(f"Farmer {farmer.farmer_code} is not suspended", farmer_id=farmer.farmer_code)
            farmer.status = 'approved'
            farmer.suspended_at = None
            farmer.suspension_reason = None
            farmer.save(update_fields=['status', 'suspended_at', 'suspension_reason', 'updated_at'])
        reviewer = reviewed_by.username if reviewed_by else 'system'
        logger.info(f"Farmer {farmer.farmer_code} reinstated by {reviewer}. {notes}".strip())
        return farmer
