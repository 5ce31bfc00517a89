# backend/lab_core/balances/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from lab_core.balances.models import BalanceMovement


class BalanceMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = BalanceMovement
        fields = [
            "id",
            "client",
            "amount_change",
            "movement_type",
            "payment",
            "work",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class ClientBalanceSnapshotSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    ledger_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    active = serializers.BooleanField()


class RecomputeResultSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
