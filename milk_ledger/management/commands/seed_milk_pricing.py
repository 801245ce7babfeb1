from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from milk_ledger.utils.pricing_service import DEFAULT_PRICES, PricingService


class Command(BaseCommand):
    help = 'Create the default milk prices (cow, buffalo, goat) if they are missing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--price',
            action='append',
            default=[],
            metavar='TYPE=PRICE',
            help='Override a default price, e.g. --price cow=48.50 (repeatable)',
        )

    def handle(self, *args, **options):
        prices = dict(DEFAULT_PRICES)
        for item in options['price']:
            milk_type, sep, value = item.partition('=')
            if not sep or not milk_type.strip():
                raise CommandError(f"Invalid --price '{item}', expected TYPE=PRICE")
            try:
                prices[milk_type.strip().lower()] = Decimal(value)
            except InvalidOperation:
                raise CommandError(f"Invalid price '{value}' for {milk_type}")

        created = PricingService.seed_defaults(prices)
        for milk_type in sorted(prices):
            if milk_type in created:
                self.stdout.write(self.style.SUCCESS(f'Created price for {milk_type} milk: {prices[milk_type]}/L'))
            else:
                self.stdout.write(self.style.WARNING(f'Price for {milk_type} milk already exists'))
