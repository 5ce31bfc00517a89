# backend/lab_core/pricing/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from lab_core.pricing.models import FixedBasePrice, PriceOverride


class BasePricePreviewRequestSerializer(serializers.Serializer):
    price_group = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    pricing_date = serializers.DateField(required=False, allow_null=True, default=None)


class BasePriceResultSerializer(serializers.Serializer):
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3)
    price_group = serializers.CharField(max_length=32)
    rule_id = serializers.IntegerField(allow_null=True)


class FixBasePriceSerializer(serializers.Serializer):
    """
    Echo of a previous preview. Stored as-is.
    """
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True, default="")
    price_group = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    rule_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class FixedBasePriceSerializer(serializers.ModelSerializer):
    class Meta:
        model = FixedBasePrice
        fields = ["id", "work", "amount", "currency", "price_group", "source_rule_id", "created_at"]
        read_only_fields = fields


class PriceOverrideCreateSerializer(serializers.Serializer):
    adjustment = serializers.DecimalField(max_digits=12, decimal_places=2)
    reason = serializers.CharField(max_length=255)


class PriceOverrideSerializer(serializers.ModelSerializer):
    class Meta:
        model = PriceOverride
        fields = ["id", "fixed_base_price", "adjustment", "reason", "created_by_user_id", "created_at"]
        read_only_fields = fields


class OverrideTraceSerializer(serializers.Serializer):
    override_id = serializers.IntegerField()
    adjustment = serializers.DecimalField(max_digits=12, decimal_places=2)
    reason = serializers.CharField()
    created_at = serializers.DateTimeField()
    created_by_user_id = serializers.IntegerField(allow_null=True)


class FinalPriceSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    fixed_price_id = serializers.IntegerField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    overrides_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    final_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    price_group = serializers.CharField()
    overrides = OverrideTraceSerializer(many=True)
