from decimal import Decimal

from django.contrib.auth.models import User

from milk_ledger.models import Farmer, MilkPricing


def make_farmer(code='10001', status='approved', **extra):
    return Farmer.objects.create(
        farmer_code=code,
        name=extra.pop('name', f'Farmer {code}'),
        farm_name=extra.pop('farm_name', 'Green Pastures'),
        status=status,
        **extra
    )


def make_prices():
    MilkPricing.objects.create(milk_type='cow', price_per_liter=Decimal('45.00'))
    MilkPricing.objects.create(milk_type='buffalo', price_per_liter=Decimal('60.00'))


def make_staff(username='collector'):
    return User.objects.create_user(username=username, password='testpass123', is_staff=True)


def make_admin(username='ledger_admin'):
    return User.objects.create_superuser(username=username, email=f'{username}@example.com', password='testpass123')
