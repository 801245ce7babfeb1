from datetime import timedelta
import logging

import django_filters
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, status as status_module
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from . import engine
from .exceptions import ValidationError
from .models import FarmerPayment, MilkContribution, StockReservation
from .permissions import IsCollectionStaff, IsLedgerAdmin, IsLedgerAdminOrReadOnly
from .serializers import (
    ContributionSubmitSerializer, DailyStockArchiveSerializer, DailyStockSummarySerializer,
    DemandRecomputeSerializer, FarmerPaymentSerializer, FarmerSerializer, InventorySummarySerializer,
    MilkContributionSerializer, MilkPricingSerializer, PaymentReviewSerializer,
    PendingPaymentSummarySerializer, ReservationRequestSerializer, StockDebitSerializer,
    StockReservationSerializer,
)

logger = logging.getLogger(__name__)


def _date_param(value, name):
    if value in (None, ''):
        return None
    try:
        parsed = parse_date(value) if isinstance(value, str) else value
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format", field=name)
    return parsed


# ══════════════════════════════════════════════════════════════════════════════
# CONTRIBUTIONS
# ══════════════════════════════════════════════════════════════════════════════

class MilkContributionFilter(django_filters.FilterSet):
    farmer_code = django_filters.CharFilter(field_name='farmer__farmer_code')
    date = django_filters.DateFilter(field_name='contribution_date')
    date_from = django_filters.DateFilter(field_name='contribution_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='contribution_date', lookup_expr='lte')

    class Meta:
        model = MilkContribution
        fields = ['farmer_code', 'date', 'date_from', 'date_to', 'decision', 'milk_type']


class MilkContributionListCreateView(generics.ListAPIView):
    """
    GET lists recorded deliveries. POST runs a delivery through quality
    enforcement and, when admitted, issues the pending payment and credits
    the day's stock.
    """
    serializer_class = MilkContributionSerializer
    permission_classes = [IsCollectionStaff]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = MilkContributionFilter
    ordering_fields = ['contribution_date', 'created_at', 'quantity']

    def get_queryset(self):
        return MilkContribution.objects.select_related('farmer', 'payment')

    def post(self, request):
        serializer = ContributionSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = engine.submit_contribution(
            data['farmer_id'],
            data['milk_type'],
            data['quantity'],
            data.get('quality_rating'),
            recorded_by=request.user,
        )
        body = {
            'admitted': result.admitted,
            'decision': result.decision.outcome,
            'substandard_streak': result.decision.streak,
            'suspended': result.suspended,
            'message': result.message,
            'contribution': MilkContributionSerializer(result.contribution).data,
            'payment': FarmerPaymentSerializer(result.payment).data if result.payment else None,
            'warning': result.warning.as_dict() if result.warning else None,
        }
        return Response(body, status=status_module.HTTP_201_CREATED)


# ══════════════════════════════════════════════════════════════════════════════
# DAILY STOCK
# ══════════════════════════════════════════════════════════════════════════════

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_today_view(request):
    return Response(DailyStockSummarySerializer(engine.get_today_summary()).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_for_date_view(request, date):
    day = _date_param(date, 'date')
    return Response(DailyStockSummarySerializer(engine.get_stock_summary(day)).data)


@api_view(['POST'])
@permission_classes([IsCollectionStaff])
def stock_debit_view(request):
    """Record a sale. ``override`` lets an admin take available stock below zero."""
    serializer = StockDebitSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    if data['override'] and not request.user.is_superuser:
        raise PermissionDenied("Only an administrator can override the stock check")

    day = data.get('date') or timezone.localdate()
    record = engine.debit_sale(day, data['quantity'], override=data['override'])
    if data['override']:
        logger.warning(f"Override debit of {data['quantity']}L on {day} by {request.user.username}")
    return Response({
        'ok': True,
        'summary': DailyStockSummarySerializer(record.summary()).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_availability_view(request):
    day = _date_param(request.query_params.get('date'), 'date') or timezone.localdate()
    quantity = request.query_params.get('quantity')
    available = engine.check_stock_availability(quantity, day)
    return Response({'date': day, 'quantity': quantity, 'available': available})


@api_view(['GET', 'POST'])
@permission_classes([IsLedgerAdminOrReadOnly])
def stock_archive_view(request):
    """
    GET returns archived days, newest first.
    POST closes a day (yesterday by default) by hand; running it again is a no-op.
    """
    if request.method == 'GET':
        archives = engine.get_archive(
            _date_param(request.query_params.get('start_date'), 'start_date'),
            _date_param(request.query_params.get('end_date'), 'end_date'),
        )
        return Response(DailyStockArchiveSerializer(archives, many=True).data)

    day = _date_param(request.data.get('date'), 'date') or timezone.localdate() - timedelta(days=1)
    result = engine.archive_and_reset_daily(day)
    logger.info(f"Manual archive of {day} requested by {request.user.username}: archived={result.archived}")
    return Response({
        'archived': result.archived,
        'date': day,
        'reason': result.reason,
        'leftover': result.leftover,
        'reservations_applied': result.reservations_applied,
        'archive': DailyStockArchiveSerializer(result.archive).data if result.archive else None,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_summary_view(request):
    summary = engine.get_inventory_summary(
        days=request.query_params.get('days'),
        start_date=_date_param(request.query_params.get('start_date'), 'start_date'),
        end_date=_date_param(request.query_params.get('end_date'), 'end_date'),
    )
    return Response(InventorySummarySerializer(summary).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contribution_totals_view(request):
    days = request.query_params.get('days', 30)
    return Response(engine.daily_contribution_totals(days))


# ══════════════════════════════════════════════════════════════════════════════
# DEMAND AND RESERVATIONS
# ══════════════════════════════════════════════════════════════════════════════

@api_view(['POST'])
@permission_classes([IsCollectionStaff])
def demand_recompute_view(request):
    """
    Forecast liters/day and store it on the day's record. Uses the
    subscriptions in the body when given, otherwise every active subscription.
    """
    serializer = DemandRecomputeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    day = data.get('date') or timezone.localdate()
    liters = engine.recompute_daily_demand(data.get('subscriptions'), date=day)
    return Response({'date': day, 'daily_demand': liters})


class StockReservationListCreateView(generics.ListAPIView):
    serializer_class = StockReservationSerializer
    permission_classes = [IsCollectionStaff]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['reservation_date', 'reservation_type']
    ordering_fields = ['reservation_date', 'created_at']

    def get_queryset(self):
        return StockReservation.objects.all()

    def post(self, request):
        serializer = ReservationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = engine.reserve_for_subscriptions(
            data['date'], data['amount'], data.get('reservation_type'), data.get('source_date'),
        )
        if not result.reserved:
            return Response({
                'reserved': False,
                'reason': result.reason,
                'warning': result.warning.as_dict(),
            })
        return Response(
            {
                'reserved': True,
                'created': result.created,
                'applied': result.applied,
                'reservation': StockReservationSerializer(result.reservation).data,
            },
            status=status_module.HTTP_201_CREATED if result.created else status_module.HTTP_200_OK,
        )


# ══════════════════════════════════════════════════════════════════════════════
# PRICING, PAYMENTS AND FARMERS
# ══════════════════════════════════════════════════════════════════════════════

@api_view(['GET', 'PATCH'])
@permission_classes([IsLedgerAdminOrReadOnly])
def pricing_view(request):
    if request.method == 'PATCH':
        prices = request.data.get('prices')
        if not isinstance(prices, dict):
            raise ValidationError("prices must be an object of milk_type to price per liter", field='prices')
        engine.update_prices(prices)
        logger.info(f"Milk prices updated by {request.user.username}: {prices}")
    return Response(MilkPricingSerializer(engine.list_prices(), many=True).data)


@api_view(['GET'])
@permission_classes([IsLedgerAdmin])
def pending_payments_summary_view(request):
    return Response(PendingPaymentSummarySerializer(engine.pending_payments_summary(), many=True).data)


@api_view(['POST'])
@permission_classes([IsLedgerAdmin])
def approve_payment_view(request, payment_id):
    payment = get_object_or_404(FarmerPayment, pk=payment_id)
    serializer = PaymentReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    payment = engine.approve_payment(payment, request.user, serializer.validated_data['notes'])
    return Response(FarmerPaymentSerializer(payment).data)


@api_view(['POST'])
@permission_classes([IsLedgerAdmin])
def reject_payment_view(request, payment_id):
    payment = get_object_or_404(FarmerPayment, pk=payment_id)
    serializer = PaymentReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    payment = engine.reject_payment(payment, request.user, serializer.validated_data['reason'])
    return Response(FarmerPaymentSerializer(payment).data)


@api_view(['POST'])
@permission_classes([IsLedgerAdmin])
def reinstate_farmer_view(request, farmer_code):
    farmer = engine.reinstate_farmer(farmer_code, request.user, request.data.get('notes', ''))
    return Response(FarmerSerializer(farmer).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """Health check endpoint for monitoring backend availability"""
    return Response({
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'service': 'dairy-stock-ledger'
    })
