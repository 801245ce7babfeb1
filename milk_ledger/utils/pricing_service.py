from decimal import Decimal
import logging

from django.db import transaction

from ..exceptions import PricingNotConfigured, ValidationError
from ..models import MilkPricing
from .stock_ledger import to_liters

logger = logging.getLogger(__name__)

DEFAULT_PRICES = {
    'cow': Decimal('45.00'),
    'buffalo': Decimal('60.00'),
    'goat': Decimal('70.00'),
}


class PricingService:

    @staticmethod
    def get_price(milk_type):
        price = MilkPricing.objects.filter(milk_type=milk_type).values_list('price_per_liter', flat=True).first()
        if price is None:
            raise PricingNotConfigured(f"No price configured for {milk_type} milk", milk_type=milk_type)
        return price

    @staticmethod
    def list_prices():
        return list(MilkPricing.objects.order_by('milk_type'))

    @staticmethod
    def update_prices(prices):
        """
        Apply ``{milk_type: price_per_liter}``. All types must already exist and
        the whole batch is applied or none of it.
        """
        if not prices:
            raise ValidationError("No prices given")
        cleaned = {}
        for milk_type, price in prices.items():
            value = to_liters(price, 'price_per_liter')
            if value < 0:
                raise ValidationError(f"Price for {milk_type} milk cannot be negative", milk_type=milk_type)
            cleaned[milk_type] = value

        with transaction.atomic():
            rows = {p.milk_type: p for p in MilkPricing.objects.select_for_update().filter(milk_type__in=cleaned)}
            missing = sorted(set(cleaned) - set(rows))
            if missing:
                raise PricingNotConfigured(f"Unknown milk types: {', '.join(missing)}", milk_types=missing)
            for milk_type, value in cleaned.items():
                pricing = rows[milk_type]
                if pricing.price_per_liter != value:
                    logger.info(f"Price of {milk_type} milk changed {pricing.price_per_liter} -> {value}")
                pricing.price_per_liter = value
                pricing.save(update_fields=['price_per_liter', 'updated_at'])
        return PricingService.list_prices()

    @staticmethod
    def seed_defaults(prices=None):
        """Create any missing default prices. Returns the milk types created."""
        created_types = []
        for milk_type, price in (prices or DEFAULT_PRICES).items():
            _, created = MilkPricing.objects.get_or_create(milk_type=milk_type, defaults={'price_per_liter': price})
            if created:
                created_types.append(milk_type)
        return created_types
