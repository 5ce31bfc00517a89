# backend/lab_core/payments/models.py
from __future__ import annotations

from django.db import models
from django.utils import timezone

from lab_core.clients.models import Client
from lab_core.common.models import AppendOnlyModel
from lab_core.works.models import Work


class PaymentMethod(models.TextChoices):
    CASH = "CASH", "Cash"
    TRANSFER = "TRANSFER", "Bank Transfer"
    CARD = "CARD", "Card"
    CHECK = "CHECK", "Check"
    OTHER = "OTHER", "Other"


class PaymentStatus(models.TextChoices):
    RECEIVED = "RECEIVED", "Received"
    CANCELLED = "CANCELLED", "Cancelled"


class Payment(AppendOnlyModel):
    """
    Money received from a client. One row per idempotency key; never edited.
    Only RECEIVED payments count towards what a work has been paid.
    """
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="payments")

    amount_total = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="MXN")
    method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = models.CharField(max_length=128, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    received_at = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.RECEIVED)

    idempotency_key = models.CharField(max_length=64, unique=True)
    recorded_by_user_id = models.IntegerField(null=True, blank=True)

    class Meta:
        db_table = "payments_payment"
        indexes = [
            models.Index(fields=["client", "received_at"]),
        ]

    def __str__(self) -> str:
        return f"Payment {self.id} {self.amount_total} {self.currency}"


class PaymentAllocation(AppendOnlyModel):
    payment = models.ForeignKey(Payment, on_delete=models.PROTECT, related_name="allocations")
    work = models.ForeignKey(Work, on_delete=models.PROTECT, related_name="payment_allocations")

    amount_applied = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = "payments_payment_allocation"
        constraints = [
            models.UniqueConstraint(fields=["payment", "work"], name="uq_allocation_payment_work"),
            models.CheckConstraint(condition=models.Q(amount_applied__gt=0), name="ck_allocation_amount_positive"),
        ]
        indexes = [
            models.Index(fields=["work"]),
        ]
