# backend/lab_core/pricing/admin.py
from __future__ import annotations

from django.contrib import admin

from lab_core.pricing.models import FixedBasePrice, PriceOverride, PricingRule


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "family",
        "work_type",
        "price_group",
        "constitution",
        "building_technique",
        "core_material_id",
        "base_price",
        "price_per_unit",
        "currency",
        "valid_from",
    )
    list_filter = ("family", "work_type", "price_group", "valid_from")
    ordering = ("-valid_from", "-id")


@admin.register(FixedBasePrice)
class FixedBasePriceAdmin(admin.ModelAdmin):
    list_display = ("id", "work", "amount", "currency", "price_group", "source_rule_id", "created_at")
    list_filter = ("price_group", "currency")
    search_fields = ("work__id",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PriceOverride)
class PriceOverrideAdmin(admin.ModelAdmin):
    list_display = ("id", "fixed_base_price", "adjustment", "reason", "created_by_user_id", "created_at")
    search_fields = ("reason",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
