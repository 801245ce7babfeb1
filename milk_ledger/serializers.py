from decimal import Decimal

from rest_framework import serializers

from .models import (
    DailyStockArchive, Farmer, FarmerPayment, MilkContribution,
    MilkPricing, StockReservation, Subscription,
)


class FarmerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Farmer
        fields = [
            'id', 'farmer_code', 'name', 'farm_name', 'farm_location', 'production_capacity',
            'status', 'suspended_at', 'suspension_reason', 'created_at',
        ]
        read_only_fields = fields


class FarmerPaymentSerializer(serializers.ModelSerializer):
    farmer_code = serializers.CharField(source='farmer.farmer_code', read_only=True)
    farmer_name = serializers.CharField(source='farmer.name', read_only=True)
    reviewed_by_name = serializers.CharField(source='reviewed_by.username', read_only=True, default=None)

    class Meta:
        model = FarmerPayment
        fields = [
            'id', 'farmer', 'farmer_code', 'farmer_name', 'amount', 'status', 'notes', 'payment_date',
            'reviewed_by', 'reviewed_by_name', 'reviewed_at', 'review_notes', 'created_at',
        ]
        read_only_fields = fields


class MilkContributionSerializer(serializers.ModelSerializer):
    farmer_code = serializers.CharField(source='farmer.farmer_code', read_only=True)
    farmer_name = serializers.CharField(source='farmer.name', read_only=True)
    quality_label = serializers.CharField(source='get_quality_rating_display', read_only=True)
    payment_status = serializers.CharField(source='payment.status', read_only=True, default=None)

    class Meta:
        model = MilkContribution
        fields = [
            'id', 'farmer', 'farmer_code', 'farmer_name', 'milk_type', 'quantity', 'submitted_quantity',
            'quality_rating', 'quality_label', 'decision', 'substandard_streak', 'contribution_date',
            'payment', 'payment_status', 'recorded_by', 'created_at',
        ]
        read_only_fields = fields


class ContributionSubmitSerializer(serializers.Serializer):
    """Input of the collection point form."""
    farmer_id = serializers.CharField(max_length=20)
    milk_type = serializers.CharField(max_length=30, required=False, default='cow')
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    quality_rating = serializers.ChoiceField(
        choices=MilkContribution.QUALITY_CHOICES, required=False, allow_null=True, default=None,
    )


class DailyStockSummarySerializer(serializers.Serializer):
    date = serializers.DateField()
    total_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    available_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    subscription_demand = serializers.DecimalField(max_digits=12, decimal_places=2)
    leftover_from_yesterday = serializers.DecimalField(max_digits=12, decimal_places=2)
    sold_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    reserved_stock = serializers.DecimalField(max_digits=12, decimal_places=2)


class DailyStockArchiveSerializer(serializers.ModelSerializer):
    class Meta:
        model = DailyStockArchive
        fields = '__all__'


class InventorySummarySerializer(serializers.Serializer):
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    avg_total_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    min_total_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    max_total_stock = serializers.DecimalField(max_digits=12, decimal_places=2)
    avg_subscription_demand = serializers.DecimalField(max_digits=12, decimal_places=2)
    avg_leftover = serializers.DecimalField(max_digits=12, decimal_places=2)
    days = serializers.IntegerField()


class StockDebitSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    override = serializers.BooleanField(required=False, default=False)


class StockReservationSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockReservation
        fields = [
            'id', 'reservation_date', 'reservation_type', 'reserved_amount', 'source_date',
            'applied_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ReservationRequestSerializer(serializers.Serializer):
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    reservation_type = serializers.ChoiceField(choices=StockReservation.TYPE_CHOICES, required=False)
    source_date = serializers.DateField(required=False)


class SubscriptionDemandSerializer(serializers.Serializer):
    """A subscription passed inline to the demand forecast."""
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    frequency = serializers.ChoiceField(choices=Subscription.FREQUENCY_CHOICES)
    status = serializers.ChoiceField(choices=Subscription.STATUS_CHOICES, required=False, default='active')


class DemandRecomputeSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    subscriptions = SubscriptionDemandSerializer(many=True, required=False)


class MilkPricingSerializer(serializers.ModelSerializer):
    class Meta:
        model = MilkPricing
        fields = ['milk_type', 'price_per_liter', 'updated_at']
        read_only_fields = ['updated_at']


class PaymentReviewSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class PendingPaymentSummarySerializer(serializers.Serializer):
    farmer_id = serializers.CharField()
    farmer_name = serializers.CharField()
    payment_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_liters = serializers.DecimalField(max_digits=14, decimal_places=2)
    last_contribution = serializers.DateField(allow_null=True)
