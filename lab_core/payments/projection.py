# backend/lab_core/payments/projection.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.db import models

from lab_core.balances.selectors import balance_debits_for_work
from lab_core.common.money import ZERO, to_money
from lab_core.payments.selectors import cash_paid_for_work
from lab_core.pricing.services import FinalPriceResolver


class WorkPaymentStatus(models.TextChoices):
    UNPAID = "UNPAID", "Unpaid"
    PARTIALLY_PAID = "PARTIALLY_PAID", "Partially Paid"
    PAID = "PAID", "Paid"
    OVERPAID = "OVERPAID", "Overpaid"


@dataclass(frozen=True)
class WorkBalance:
    work_id: int
    due: Decimal
    paid: Decimal
    remaining: Decimal
    status: str
    currency: str


def already_paid(*, work_id: int) -> Decimal:
    """
    Cash allocations of received payments plus credit applied from the
    client balance.
    """
    return to_money(cash_paid_for_work(work_id=work_id) + balance_debits_for_work(work_id=work_id))


def derive_status(*, due: Decimal, paid: Decimal) -> tuple[Decimal, str]:
    """
    Returns (remaining clamped at zero, status). Status is computed from the
    unclamped value so OVERPAID stays visible.
    """
    raw = to_money(due - paid)

    if paid == ZERO:
        status = WorkPaymentStatus.UNPAID
    elif raw < ZERO:
        status = WorkPaymentStatus.OVERPAID
    elif raw == ZERO:
        status = WorkPaymentStatus.PAID
    else:
        status = WorkPaymentStatus.PARTIALLY_PAID

    return max(raw, ZERO), status.value


class WorkBalanceProjection:
    @staticmethod
    def project(*, work_id: int) -> WorkBalance:
        final = FinalPriceResolver.resolve(work_id=work_id)
        paid = already_paid(work_id=work_id)
        remaining, status = derive_status(due=final.final_price, paid=paid)

        return WorkBalance(
            work_id=work_id,
            due=final.final_price,
            paid=paid,
            remaining=remaining,
            status=status,
            currency=final.currency,
        )
