# backend/lab_core/pricing/selectors.py
from __future__ import annotations

from datetime import date

from django.db.models import Q, QuerySet

from lab_core.pricing.models import FixedBasePrice, PriceOverride, PricingRule


def _wildcard(field: str, value) -> Q:
    # A null rule attribute matches any work value, including a missing one.
    if value is None:
        return Q(**{f"{field}__isnull": True})
    return Q(**{f"{field}__isnull": True}) | Q(**{field: value})


def candidate_rules(
    *,
    family: str,
    work_type: str,
    price_group: str,
    as_of: date,
    constitution: str | None = None,
    building_technique: str | None = None,
    core_material_id: int | None = None,
) -> QuerySet[PricingRule]:
    return (
        PricingRule.objects.filter(
            family=family,
            work_type=work_type,
            price_group=price_group,
            valid_from__lte=as_of,
        )
        .filter(_wildcard("constitution", constitution))
        .filter(_wildcard("building_technique", building_technique))
        .filter(_wildcard("core_material_id", core_material_id))
    )


def fixed_price_for_work(*, work_id: int) -> FixedBasePrice | None:
    return FixedBasePrice.objects.filter(work_id=work_id).first()


def overrides_for(*, fixed_price_id: int) -> QuerySet[PriceOverride]:
    return PriceOverride.objects.filter(fixed_base_price_id=fixed_price_id).order_by("created_at", "id")
