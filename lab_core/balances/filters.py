# backend/lab_core/balances/filters.py
from __future__ import annotations

import django_filters

from lab_core.balances.models import BalanceMovement, MovementType


class BalanceMovementFilter(django_filters.FilterSet):
    movement_type = django_filters.ChoiceFilter(choices=MovementType.choices)
    created_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    created_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    work = django_filters.NumberFilter(field_name="work_id")

    class Meta:
        model = BalanceMovement
        fields = ["movement_type", "created_from", "created_to", "work"]
