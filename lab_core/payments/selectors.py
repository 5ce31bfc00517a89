# backend/lab_core/payments/selectors.py
from __future__ import annotations

from decimal import Decimal

from django.db.models import QuerySet, Sum
from rest_framework.exceptions import NotFound

from lab_core.common.money import ZERO, to_money
from lab_core.payments.models import Payment, PaymentAllocation, PaymentStatus


def payment_by_key(*, idempotency_key: str) -> Payment | None:
    return Payment.objects.filter(idempotency_key=idempotency_key).first()


def get_payment(*, payment_id: int) -> Payment:
    payment = Payment.objects.prefetch_related("allocations").filter(id=payment_id).first()
    if payment is None:
        raise NotFound(f"Payment {payment_id} not found.")
    return payment


def payments_for_client(*, client_id: int) -> QuerySet[Payment]:
    return (
        Payment.objects.filter(client_id=client_id)
        .prefetch_related("allocations")
        .order_by("-received_at", "-id")
    )


def cash_paid_for_work(*, work_id: int) -> Decimal:
    total = PaymentAllocation.objects.filter(
        work_id=work_id,
        payment__status=PaymentStatus.RECEIVED,
    ).aggregate(total=Sum("amount_applied"))["total"]
    return to_money(total if total is not None else ZERO)
