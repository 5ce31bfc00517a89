# backend/lab_core/payments/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lab_core.balances.models import BalanceMovement, MovementType
from lab_core.balances.services import ClientBalanceService
from lab_core.common.idempotency import insert_once
from lab_core.common.money import ZERO, to_money
from lab_core.payments.allocation import AllocatedWork, AllocationPlan, WorkDue, allocate
from lab_core.payments.exceptions import AllocationExceedsUnpaid, IdempotencyKeyConflict, UnconfirmedRemainder
from lab_core.payments.models import Payment, PaymentAllocation, PaymentMethod, PaymentStatus
from lab_core.payments.projection import WorkBalanceProjection
from lab_core.payments.selectors import payment_by_key
from lab_core.works.selectors import works_for_client

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_MIN = 8
IDEMPOTENCY_KEY_MAX = 64

EXCESS_NOTE = "Excess payment credited to client balance"


@dataclass(frozen=True)
class PaymentPreview:
    client_id: int
    payment_amount: Decimal
    per_work: list[AllocatedWork]
    total_unpaid_selected: Decimal
    total_allocated: Decimal
    remaining_unallocated: Decimal
    requires_balance_confirmation: bool
    warnings: list[str]

    @classmethod
    def from_plan(cls, *, client_id: int, plan: AllocationPlan) -> "PaymentPreview":
        return cls(
            client_id=client_id,
            payment_amount=plan.payment_amount,
            per_work=plan.lines,
            total_unpaid_selected=plan.total_unpaid_selected,
            total_allocated=plan.total_allocated,
            remaining_unallocated=plan.remaining_unallocated,
            requires_balance_confirmation=plan.requires_balance_confirmation,
            warnings=plan.warnings,
        )


@dataclass(frozen=True)
class AllocationRequest:
    work_id: int
    amount: Decimal


@dataclass(frozen=True)
class RegistrationResult:
    payment: Payment
    created: bool


def _positive_amount(value, field: str) -> Decimal:
    amount = to_money(value, field=field)
    if amount <= ZERO:
        raise ValidationError({field: "Amount must be > 0."})
    return amount


def _work_dues(*, client_id: int, work_ids: Iterable[int]) -> list[WorkDue]:
    """
    Ownership check plus a fresh projection for each work, ascending id.
    """
    dues = []
    for work in works_for_client(client_id=client_id, work_ids=work_ids):
        balance = WorkBalanceProjection.project(work_id=work.id)
        dues.append(
            WorkDue(
                work_id=work.id,
                work_label=work.label,
                price=balance.due,
                already_paid=balance.paid,
                unpaid=balance.remaining,
            )
        )
    return dues


class PaymentPreviewService:
    @staticmethod
    def preview(
        *,
        client_id: int,
        payment_amount: Decimal,
        work_ids: list[int],
        allocation_overrides: Mapping[int, Decimal] | None = None,
    ) -> PaymentPreview:
        """
        Read-only. Shows exactly what register() would persist for the same
        input, given no price or payment changes in between.
        """
        amount = _positive_amount(payment_amount, "payment_amount")
        if not work_ids:
            raise ValidationError({"work_ids": "Select at least one work."})

        explicit = None
        if allocation_overrides is not None:
            explicit = {int(k): to_money(v, field="allocation_overrides") for k, v in allocation_overrides.items()}

        plan = allocate(
            amount=amount,
            works=_work_dues(client_id=client_id, work_ids=work_ids),
            explicit=explicit,
        )
        return PaymentPreview.from_plan(client_id=client_id, plan=plan)


class PaymentRegistrationService:
    @staticmethod
    def _validate_key(key: str | None) -> str:
        key = (key or "").strip()
        if not (IDEMPOTENCY_KEY_MIN <= len(key) <= IDEMPOTENCY_KEY_MAX):
            raise ValidationError(
                {"idempotency_key": f"Idempotency key must be {IDEMPOTENCY_KEY_MIN}-{IDEMPOTENCY_KEY_MAX} characters."}
            )
        return key

    @staticmethod
    def _replay(payment: Payment, *, client_id: int) -> RegistrationResult:
        if payment.client_id != client_id:
            raise IdempotencyKeyConflict(
                details={"idempotency_key": payment.idempotency_key},
            )
        logger.info("Payment replay key=%s payment=%s", payment.idempotency_key, payment.id)
        return RegistrationResult(payment=payment, created=False)

    @staticmethod
    def _normalize_allocations(allocations: Iterable[AllocationRequest]) -> dict[int, Decimal]:
        requested: dict[int, Decimal] = {}
        for a in allocations:
            work_id = int(a.work_id)
            if work_id in requested:
                raise ValidationError({"allocations": f"Work {work_id} is allocated more than once."})
            amount = to_money(a.amount, field="allocations")
            if amount < ZERO:
                raise ValidationError({"allocations": f"Allocation for work {work_id} must be >= 0."})
            requested[work_id] = amount
        return requested

    @staticmethod
    @transaction.atomic
    def register(
        *,
        client_id: int,
        payment_amount: Decimal,
        idempotency_key: str,
        allocations: Iterable[AllocationRequest],
        move_remainder_to_balance: bool = False,
        method: str = PaymentMethod.CASH,
        reference: str = "",
        notes: str = "",
        recorded_by_user_id: int | None = None,
    ) -> RegistrationResult:
        key = PaymentRegistrationService._validate_key(idempotency_key)

        existing = payment_by_key(idempotency_key=key)
        if existing is not None:
            return PaymentRegistrationService._replay(existing, client_id=client_id)

        amount = _positive_amount(payment_amount, "payment_amount")
        if method not in PaymentMethod.values:
            raise ValidationError({"method": f"Unknown payment method '{method}'."})

        requested = PaymentRegistrationService._normalize_allocations(allocations)
        if not requested and not move_remainder_to_balance:
            raise ValidationError({"allocations": "Provide allocations or move the payment to the client balance."})

        # Serializes every payment and ledger mutation of this client.
        ClientBalanceService.lock_or_create(client_id=client_id)

        # A same-key registration may have committed while we waited for the lock.
        existing = payment_by_key(idempotency_key=key)
        if existing is not None:
            return PaymentRegistrationService._replay(existing, client_id=client_id)

        plan = allocate(
            amount=amount,
            works=_work_dues(client_id=client_id, work_ids=requested.keys()) if requested else [],
            explicit=requested,
        )

        if plan.remaining_unallocated > ZERO and not move_remainder_to_balance:
            raise UnconfirmedRemainder(
                details={
                    "payment_amount": str(amount),
                    "total_allocated": str(plan.total_allocated),
                    "remaining_unallocated": str(plan.remaining_unallocated),
                }
            )

        payment, created = insert_once(
            lambda: Payment.objects.create(
                client_id=client_id,
                amount_total=amount,
                currency=getattr(settings, "LAB_DEFAULT_CURRENCY", "MXN"),
                method=method,
                reference=reference or "",
                notes=notes or "",
                received_at=timezone.now(),
                status=PaymentStatus.RECEIVED,
                idempotency_key=key,
                recorded_by_user_id=recorded_by_user_id,
            ),
            lambda: payment_by_key(idempotency_key=key),
        )
        if not created:
            return PaymentRegistrationService._replay(payment, client_id=client_id)

        for line in plan.lines:
            if line.allocated > ZERO:
                PaymentAllocation.objects.create(
                    payment=payment,
                    work_id=line.work_id,
                    amount_applied=line.allocated,
                )

        if plan.remaining_unallocated > ZERO:
            ClientBalanceService.credit_balance(
                client_id=client_id,
                amount=plan.remaining_unallocated,
                movement_type=MovementType.PAY_EXCESS,
                payment_id=payment.id,
                note=EXCESS_NOTE,
            )

        logger.info(
            "Payment registered id=%s client=%s amount=%s allocated=%s credited=%s",
            payment.id,
            client_id,
            amount,
            plan.total_allocated,
            plan.remaining_unallocated,
        )
        return RegistrationResult(payment=payment, created=True)


class BalanceApplicationService:
    @staticmethod
    @transaction.atomic
    def apply_to_work(
        *,
        client_id: int,
        work_id: int,
        amount: Decimal,
        note: str = "",
    ) -> BalanceMovement:
        """
        Pay (part of) a work from the client's standing credit.
        """
        amount = _positive_amount(amount, "amount")

        ClientBalanceService.lock_or_create(client_id=client_id)
        (due,) = _work_dues(client_id=client_id, work_ids=[work_id])

        if amount > due.unpaid:
            raise AllocationExceedsUnpaid(
                details={"work_id": work_id, "unpaid": str(due.unpaid), "requested": str(amount)}
            )

        return ClientBalanceService.apply_balance_to_work(
            client_id=client_id,
            work_id=work_id,
            amount=amount,
            note=note or f"Balance applied to {due.work_label}",
        )
