"""
QualityEnforcer decides whether a farmer's contribution is admitted, admitted
with a warning, or triggers suspension of the farmer.

The streak of substandard deliveries is derived from contribution history on
every submission; nothing about it is stored on the farmer.
"""
from dataclasses import dataclass
import logging

from django.db import transaction
from django.utils import timezone

from ..conf import ledger_setting
from ..models import Farmer, MilkContribution

logger = logging.getLogger(__name__)

ADMIT = 'admit'
WARN = 'warn'
SUSPEND = 'suspend'


@dataclass(frozen=True)
class QualityDecision:
    outcome: str
    streak: int = 0

    @property
    def admitted(self):
        return self.outcome == ADMIT

    @property
    def suspended(self):
        return self.outcome == SUSPEND

    def message(self):
        if self.outcome == SUSPEND:
            return (f"Farmer suspended after {self.streak} consecutive substandard deliveries. "
                    "The account is blocked until manual review.")
        if self.outcome == WARN:
            return (f"Substandard milk: {self.streak} consecutive substandard "
                    f"deliver{'y' if self.streak == 1 else 'ies'}. Quantity not added to stock.")
        return ''


def is_substandard(rating):
    """A missing rating never counts as substandard."""
    return rating is not None and rating >= ledger_setting('SUBSTANDARD_RATING')


def count_substandard_streak(current_rating, previous_ratings):
    """
    Length of the run of substandard ratings ending with ``current_rating``.

    ``previous_ratings`` is ordered most recent first. Returns 0 when the
    current rating is not substandard.
    """
    if not is_substandard(current_rating):
        return 0
    streak = 1
    for rating in previous_ratings:
        if not is_substandard(rating):
            break
        streak += 1
    return streak


def decide(current_rating, previous_ratings):
    streak = count_substandard_streak(current_rating, previous_ratings)
    if streak >= ledger_setting('SUSPENSION_THRESHOLD'):
        return QualityDecision(SUSPEND, streak)
    if streak > 0:
        return QualityDecision(WARN, streak)
    return QualityDecision(ADMIT, 0)


class QualityEnforcer:
    """Service class wrapping quality decisions and their side effects"""

    @staticmethod
    def recent_ratings(farmer):
        """Ratings of the farmer's contributions, newest first, read lazily."""
        return (
            MilkContribution.objects
            .filter(farmer=farmer)
            .order_by('-contribution_date', '-created_at', '-id')
            .values_list('quality_rating', flat=True)
            .iterator()
        )

    @staticmethod
    def evaluate(farmer, quality_rating):
        """
        Decide ADMIT / WARN(n) / SUSPEND(n) for a submission that has not been
        saved yet.
        """
        decision = decide(quality_rating, QualityEnforcer.recent_ratings(farmer))
        if decision.outcome != ADMIT:
            logger.warning(
                f"Farmer {farmer.farmer_code}: substandard delivery streak {decision.streak} -> {decision.outcome}"
            )
        return decision

    @staticmethod
    def suspend_farmer(farmer, streak):
        """Block the farmer account. Runs inside the caller's transaction."""
        reason = f"Automatically suspended after {streak} consecutive substandard milk deliveries"
        with transaction.atomic():
            Farmer.objects.filter(pk=farmer.pk).update(
                status='blocked',
                suspended_at=timezone.now(),
                suspension_reason=reason,
                updated_at=timezone.now(),
            )
        farmer.refresh_from_db(fields=['status', 'suspended_at', 'suspension_reason', 'updated_at'])
        logger.info(f"Farmer {farmer.farmer_code} blocked: {reason}")
        return farmer
