# backend/lab_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from lab_core.balances.api.views import ClientBalanceViewSet
from lab_core.payments.api.views import ApplyBalanceView, ClientPaymentsView, PaymentViewSet, WorkBalanceView
from lab_core.pricing.api.views import WorkPricingViewSet

router = DefaultRouter()

router.register(r"works", WorkPricingViewSet, basename="work-pricing")
router.register(r"payments", PaymentViewSet, basename="payments")
router.register(r"clients", ClientBalanceViewSet, basename="client-balance")

urlpatterns = [
    # Auth
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Non-ViewSet endpoints
    path("works/<int:work_id>/balance/", WorkBalanceView.as_view(), name="work-balance"),
    path("clients/<int:client_id>/payments/", ClientPaymentsView.as_view(), name="client-payments"),
    path("clients/<int:client_id>/balance/apply/", ApplyBalanceView.as_view(), name="client-balance-apply"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
