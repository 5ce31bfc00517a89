# backend/lab_core/payments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from lab_core.payments.models import Payment, PaymentAllocation, PaymentMethod
from lab_core.payments.projection import WorkPaymentStatus
from lab_core.payments.services import IDEMPOTENCY_KEY_MAX, IDEMPOTENCY_KEY_MIN

MONEY = {"max_digits": 12, "decimal_places": 2}


class PaymentPreviewRequestSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    payment_amount = serializers.DecimalField(**MONEY)
    work_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    allocation_overrides = serializers.DictField(
        child=serializers.DecimalField(**MONEY),
        required=False,
        allow_null=True,
        default=None,
        help_text="Optional {work_id: amount}. When present, replaces automatic allocation.",
    )

    def validate_allocation_overrides(self, value):
        if value is None:
            return None
        out = {}
        for k, v in value.items():
            try:
                out[int(k)] = v
            except (TypeError, ValueError):
                raise serializers.ValidationError(f"Invalid work id '{k}'.")
        return out


class AllocatedWorkSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    work_label = serializers.CharField()
    price = serializers.DecimalField(**MONEY)
    already_paid = serializers.DecimalField(**MONEY)
    unpaid = serializers.DecimalField(**MONEY)
    max_allocatable = serializers.DecimalField(**MONEY)
    allocated = serializers.DecimalField(**MONEY)


class PaymentPreviewSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    payment_amount = serializers.DecimalField(**MONEY)
    per_work = AllocatedWorkSerializer(many=True)
    total_unpaid_selected = serializers.DecimalField(**MONEY)
    total_allocated = serializers.DecimalField(**MONEY)
    remaining_unallocated = serializers.DecimalField(**MONEY)
    requires_balance_confirmation = serializers.BooleanField()
    warnings = serializers.ListField(child=serializers.CharField())


class AllocationInputSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    allocated_amount = serializers.DecimalField(**MONEY)


class PaymentRegisterSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    payment_amount = serializers.DecimalField(**MONEY)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    allocations = AllocationInputSerializer(many=True, required=False, default=list)
    move_remainder_to_balance = serializers.BooleanField(default=False)
    idempotency_key = serializers.CharField(
        min_length=IDEMPOTENCY_KEY_MIN,
        max_length=IDEMPOTENCY_KEY_MAX,
        required=False,
        help_text="Required here or in the Idempotency-Key header.",
    )


class PaymentAllocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentAllocation
        fields = ["id", "work", "amount_applied", "created_at"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    allocations = PaymentAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "client",
            "amount_total",
            "currency",
            "method",
            "reference",
            "notes",
            "received_at",
            "status",
            "idempotency_key",
            "recorded_by_user_id",
            "allocations",
            "created_at",
        ]
        read_only_fields = fields


class WorkBalanceSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    due = serializers.DecimalField(**MONEY)
    paid = serializers.DecimalField(**MONEY)
    remaining = serializers.DecimalField(**MONEY)
    status = serializers.ChoiceField(choices=WorkPaymentStatus.choices)
    currency = serializers.CharField()


class ApplyBalanceSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    amount = serializers.DecimalField(**MONEY)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
