# backend/lab_core/payments/filters.py
from __future__ import annotations

import django_filters

from lab_core.payments.models import Payment, PaymentMethod, PaymentStatus


class PaymentFilter(django_filters.FilterSet):
    method = django_filters.ChoiceFilter(choices=PaymentMethod.choices)
    status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    received_from = django_filters.DateFilter(field_name="received_at", lookup_expr="date__gte")
    received_to = django_filters.DateFilter(field_name="received_at", lookup_expr="date__lte")

    class Meta:
        model = Payment
        fields = ["method", "status", "received_from", "received_to"]
