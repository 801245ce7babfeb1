from django.contrib import admin

from .models import (
    DailyStockArchive, DailyStockRecord, Farmer, FarmerPayment, MilkContribution,
    MilkPricing, StockReservation, Subscription,
)


class ReadOnlyAdminMixin:
    """Rows that are facts once written."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Farmer)
class FarmerAdmin(admin.ModelAdmin):
    list_display = ('farmer_code', 'name', 'farm_name', 'status', 'production_capacity', 'suspended_at')
    search_fields = ('farmer_code', 'name', 'farm_name', 'user__username')
    list_filter = ('status', 'created_at')
    readonly_fields = ('suspended_at', 'suspension_reason', 'created_at', 'updated_at')

@admin.register(MilkPricing)
class MilkPricingAdmin(admin.ModelAdmin):
    list_display = ('milk_type', 'price_per_liter', 'updated_at')
    search_fields = ('milk_type',)

@admin.register(MilkContribution)
class MilkContributionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('id', 'farmer', 'milk_type', 'quantity', 'submitted_quantity', 'quality_rating', 'decision', 'contribution_date')
    search_fields = ('farmer__farmer_code', 'farmer__name')
    list_filter = ('decision', 'quality_rating', 'milk_type', 'contribution_date')

@admin.register(FarmerPayment)
class FarmerPaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'farmer', 'amount', 'status', 'payment_date', 'reviewed_by', 'reviewed_at')
    search_fields = ('farmer__farmer_code', 'farmer__name')
    list_filter = ('status', 'payment_date')
    readonly_fields = ('farmer', 'amount', 'notes', 'reviewed_by', 'reviewed_at', 'created_at', 'updated_at')

@admin.register(DailyStockRecord)
class DailyStockRecordAdmin(admin.ModelAdmin):
    list_display = ('date', 'total_stock', 'available_stock', 'sold_stock', 'reserved_stock', 'subscription_demand', 'leftover_milk')
    list_filter = ('date',)
    readonly_fields = ('total_stock', 'available_stock', 'sold_stock', 'reserved_stock', 'leftover_milk', 'created_at', 'updated_at')

@admin.register(DailyStockArchive)
class DailyStockArchiveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('date', 'total_stock', 'available_stock', 'sold_stock', 'subscription_demand', 'closing_leftover', 'archived_at')
    list_filter = ('date',)

@admin.register(StockReservation)
class StockReservationAdmin(admin.ModelAdmin):
    list_display = ('reservation_date', 'reservation_type', 'reserved_amount', 'source_date', 'applied_at')
    list_filter = ('reservation_type', 'reservation_date')
    readonly_fields = ('applied_at', 'created_at', 'updated_at')

@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer', 'milk_type', 'quantity', 'frequency', 'status', 'start_date')
    search_fields = ('customer__username',)
    list_filter = ('frequency', 'status', 'milk_type')
