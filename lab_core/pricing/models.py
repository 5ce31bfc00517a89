# backend/lab_core/pricing/models.py
from __future__ import annotations

from django.db import models

from lab_core.common.models import AppendOnlyModel
from lab_core.works.models import BuildingTechnique, Constitution, Work, WorkFamily


class PricingRule(AppendOnlyModel):
    """
    Tariff entry. Null constitution / technique / material match any work.
    Never edited: a newer valid_from supersedes.
    """
    family = models.CharField(max_length=32, choices=WorkFamily.choices)
    work_type = models.CharField(max_length=32)
    price_group = models.CharField(max_length=32, default="DEFAULT")

    constitution = models.CharField(max_length=16, choices=Constitution.choices, null=True, blank=True)
    building_technique = models.CharField(max_length=16, choices=BuildingTechnique.choices, null=True, blank=True)
    core_material_id = models.BigIntegerField(null=True, blank=True)

    base_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    price_per_unit = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default="MXN")

    valid_from = models.DateField()

    class Meta:
        db_table = "pricing_rule"
        indexes = [
            models.Index(fields=["family", "work_type", "price_group", "valid_from"]),
        ]

    def __str__(self) -> str:
        return f"{self.family}/{self.work_type}/{self.price_group} from {self.valid_from}"


class FixedBasePrice(AppendOnlyModel):
    """
    The authoritative base price of a work. Created once, never overwritten.
    """
    work = models.OneToOneField(Work, on_delete=models.PROTECT, related_name="fixed_base_price")

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="MXN")
    price_group = models.CharField(max_length=32, default="DEFAULT")
    source_rule_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "pricing_fixed_base_price"


class PriceOverride(AppendOnlyModel):
    fixed_base_price = models.ForeignKey(FixedBasePrice, on_delete=models.PROTECT, related_name="overrides")

    adjustment = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=255)
    created_by_user_id = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = "pricing_price_override"
        indexes = [
            models.Index(fields=["fixed_base_price", "created_at"]),
        ]
