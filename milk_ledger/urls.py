from django.urls import path

from . import views

urlpatterns = [
    path('contributions/', views.MilkContributionListCreateView.as_view(), name='milk-contributions'),
    path('contributions/daily-totals/', views.contribution_totals_view, name='milk-contribution-totals'),

    path('stock/today/', views.stock_today_view, name='stock-today'),
    path('stock/debit/', views.stock_debit_view, name='stock-debit'),
    path('stock/availability/', views.stock_availability_view, name='stock-availability'),
    path('stock/archive/', views.stock_archive_view, name='stock-archive'),
    path('stock/inventory-summary/', views.inventory_summary_view, name='stock-inventory-summary'),
    path('stock/<str:date>/', views.stock_for_date_view, name='stock-for-date'),

    path('demand/recompute/', views.demand_recompute_view, name='demand-recompute'),
    path('reservations/', views.StockReservationListCreateView.as_view(), name='stock-reservations'),

    path('pricing/', views.pricing_view, name='milk-pricing'),

    path('payments/pending-summary/', views.pending_payments_summary_view, name='payments-pending-summary'),
    path('payments/<int:payment_id>/approve/', views.approve_payment_view, name='payment-approve'),
    path('payments/<int:payment_id>/reject/', views.reject_payment_view, name='payment-reject'),

    path('farmers/<str:farmer_code>/reinstate/', views.reinstate_farmer_view, name='farmer-reinstate'),

    path('health/', views.health_check, name='health-check'),
]
