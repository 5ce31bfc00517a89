# backend/lab_core/balances/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from lab_core.clients.models import Client
from lab_core.common.models import AppendOnlyModel, TimeStampedModel
from lab_core.works.models import Work


class MovementType(models.TextChoices):
    PAY_EXCESS = "PAY_EXCESS", "Excess payment credited"
    APPLY_WORK = "APPLY_WORK", "Balance applied to work"


class ClientBalance(TimeStampedModel):
    """
    Cached sum of a client's BalanceMovement rows.

    Only ClientBalanceService writes it, always with the row locked and in the
    same transaction as the movement it reflects.
    """
    client = models.OneToOneField(Client, on_delete=models.PROTECT, related_name="balance")

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="MXN")
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "balances_client_balance"
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gte=0), name="ck_client_balance_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.client_id}: {self.amount} {self.currency}"


class BalanceMovement(AppendOnlyModel):
    """
    Ledger row, source of truth. Credits are positive, debits negative.
    """
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="balance_movements")

    amount_change = models.DecimalField(max_digits=12, decimal_places=2)
    movement_type = models.CharField(max_length=16, choices=MovementType.choices)

    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.PROTECT,
        related_name="balance_movements",
        null=True,
        blank=True,
    )
    work = models.ForeignKey(
        Work,
        on_delete=models.PROTECT,
        related_name="balance_movements",
        null=True,
        blank=True,
    )
    note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "balances_balance_movement"
        indexes = [
            models.Index(fields=["client", "created_at"]),
            models.Index(fields=["work", "movement_type"]),
        ]
