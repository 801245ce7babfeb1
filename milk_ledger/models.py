from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .conf import ledger_setting


ZERO = Decimal('0.00')


class Farmer(models.Model):
    """A milk supplier. Looked up at the collection point by its short code."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('blocked', 'Blocked'),
    ]

    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='farmer_account')
    farmer_code = models.CharField(max_length=10, unique=True, help_text="Short human-facing farmer ID (5 digits)")
    name = models.CharField(max_length=200)
    farm_name = models.CharField(max_length=200, blank=True, null=True)
    farm_location = models.CharField(max_length=200, blank=True, null=True)
    production_capacity = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Liters per day")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    # Suspension fields
    suspended_at = models.DateTimeField(null=True, blank=True)
    suspension_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['farmer_code']

    def __str__(self):
        return f"{self.name} ({self.farmer_code})"

    @property
    def is_blocked(self):
        return self.status == 'blocked'


class MilkPricing(models.Model):
    milk_type = models.CharField(max_length=30, unique=True)
    price_per_liter = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['milk_type']
        verbose_name_plural = 'milk pricing'

    def __str__(self):
        return f"{self.milk_type}: {self.price_per_liter}/L"


class FarmerPayment(models.Model):
    """Money owed to a farmer for admitted milk. Only the status ever changes."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    farmer = models.ForeignKey(Farmer, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True, null=True)
    payment_date = models.DateField(default=timezone.localdate)
    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_farmer_payments')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Payment {self.id} - {self.farmer.farmer_code} - {self.amount} ({self.status})"


class MilkContribution(models.Model):
    """
    A single delivery of milk by a farmer.

    Contributions are facts: once saved only the payment link may change.
    WARN and SUSPEND decisions store ``quantity=0`` and keep the measured
    volume in ``submitted_quantity`` for audit.
    """
    QUALITY_CHOICES = [
        (1, 'Grade A'),
        (2, 'Grade B'),
        (3, 'Substandard'),
    ]

    DECISION_CHOICES = [
        ('admit', 'Admitted'),
        ('warn', 'Warned'),
        ('suspend', 'Suspended'),
    ]

    farmer = models.ForeignKey(Farmer, on_delete=models.PROTECT, related_name='contributions')
    milk_type = models.CharField(max_length=30, default='cow')
    quantity = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    submitted_quantity = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    quality_rating = models.PositiveSmallIntegerField(choices=QUALITY_CHOICES, null=True, blank=True)
    decision = models.CharField(max_length=10, choices=DECISION_CHOICES, default='admit')
    substandard_streak = models.PositiveSmallIntegerField(default=0)
    contribution_date = models.DateField(default=timezone.localdate)
    payment = models.ForeignKey(FarmerPayment, on_delete=models.SET_NULL, null=True, blank=True, related_name='contributions')
    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='recorded_milk_contributions')
    created_at = models.DateTimeField(default=timezone.now)

    MUTABLE_FIELDS = frozenset({'payment'})

    class Meta:
        ordering = ['-contribution_date', '-created_at', '-id']
        indexes = [
            models.Index(fields=['farmer', 'contribution_date'], name='milk_contrib_farmer_date_idx'),
        ]

    def __str__(self):
        return f"{self.farmer.farmer_code} - {self.quantity}L {self.milk_type} on {self.contribution_date}"

    @property
    def is_substandard(self):
        return self.quality_rating is not None and self.quality_rating >= ledger_setting('SUBSTANDARD_RATING')

    @property
    def admitted(self):
        return self.decision == 'admit'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get('update_fields')
            if not update_fields or not set(update_fields) <= self.MUTABLE_FIELDS:
                raise ValueError("Milk contributions are immutable; only the payment link can be updated")
        super().save(*args, **kwargs)


class DailyStockRecord(models.Model):
    """
    The live ledger row for one calendar day.

    Invariant: available_stock = total_stock - sold_stock - reserved_stock.
    All mutations go through ``StockLedgerService`` as single UPDATE
    statements with F() expressions.
    """
    date = models.DateField(unique=True)
    total_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    available_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    sold_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    reserved_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    subscription_demand = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    leftover_milk = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, help_text="Opening balance carried from the previous day")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"Stock {self.date}: {self.available_stock}/{self.total_stock}L"

    def summary(self):
        return {
            'date': self.date,
            'total_stock': self.total_stock,
            'available_stock': self.available_stock,
            'subscription_demand': self.subscription_demand,
            'leftover_from_yesterday': self.leftover_milk,
            'sold_stock': self.sold_stock,
            'reserved_stock': self.reserved_stock,
        }

    def is_consistent(self):
        return self.available_stock == self.total_stock - self.sold_stock - self.reserved_stock


class DailyStockArchive(models.Model):
    """Immutable end-of-day copy of a DailyStockRecord."""
    date = models.DateField(unique=True)
    total_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    available_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    sold_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    reserved_stock = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    subscription_demand = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    leftover_milk = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    closing_leftover = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, help_text="Available stock at close, carried to the next day")
    archived_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"Archive {self.date}: total {self.total_stock}L, leftover {self.closing_leftover}L"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Stock archives are immutable")
        super().save(*args, **kwargs)


class StockReservation(models.Model):
    """A forward claim on a future day's stock. One row per (date, type)."""
    TYPE_CHOICES = [
        ('subscription', 'Subscription'),
        ('bulk_order', 'Bulk Order'),
        ('other', 'Other'),
    ]

    reservation_date = models.DateField()
    reservation_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='subscription')
    reserved_amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    source_date = models.DateField(help_text="Day whose stock funds the reservation")
    applied_at = models.DateTimeField(null=True, blank=True, help_text="When the archive run applied it to the opening balance")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-reservation_date', 'reservation_type']
        unique_together = ['reservation_date', 'reservation_type']

    def __str__(self):
        return f"{self.reservation_type} reservation {self.reserved_amount}L for {self.reservation_date}"


class Subscription(models.Model):
    FREQUENCY_CHOICES = [
        ('daily', 'Daily'),
        ('weekly', 'Weekly'),
        ('monthly', 'Monthly'),
    ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('cancelled', 'Cancelled'),
    ]

    customer = models.ForeignKey(User, on_delete=models.CASCADE, related_name='milk_subscriptions')
    milk_type = models.CharField(max_length=30, default='cow')
    quantity = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES, default='daily')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    start_date = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.customer.username} - {self.quantity}L {self.milk_type} {self.frequency} ({self.status})"
