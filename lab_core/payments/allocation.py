# backend/lab_core/payments/allocation.py
"""
Payment allocation shared by preview and registration.

Preview and commit both call `allocate`; commit passes the confirmed amounts
as explicit allocations, so a commit can only ever persist something a
preview would have shown.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from rest_framework.exceptions import ValidationError

from lab_core.common.money import ZERO, money_sum, to_money
from lab_core.payments.exceptions import AllocationExceedsPayment, AllocationExceedsUnpaid


@dataclass(frozen=True)
class WorkDue:
    work_id: int
    work_label: str
    price: Decimal
    already_paid: Decimal
    unpaid: Decimal


@dataclass(frozen=True)
class AllocatedWork:
    work_id: int
    work_label: str
    price: Decimal
    already_paid: Decimal
    unpaid: Decimal
    max_allocatable: Decimal
    allocated: Decimal


@dataclass(frozen=True)
class AllocationPlan:
    payment_amount: Decimal
    lines: list[AllocatedWork]
    total_unpaid_selected: Decimal
    total_allocated: Decimal
    remaining_unallocated: Decimal
    warnings: list[str] = field(default_factory=list)

    @property
    def requires_balance_confirmation(self) -> bool:
        return self.remaining_unallocated > ZERO


def allocate(
    *,
    amount: Decimal,
    works: Iterable[WorkDue],
    explicit: Mapping[int, Decimal] | None = None,
) -> AllocationPlan:
    """
    Walk works in ascending id order handing out `amount`.

    max_allocatable is the work's unpaid amount, independent of ordering.
    Automatic mode (explicit is None): each work gets min(unpaid, available).
    Explicit mode: each work gets exactly explicit[work_id] (0 when absent),
    rejected instead of clamped when it exceeds the unpaid amount or what is
    left of the payment.
    """
    amount = to_money(amount)
    ordered = sorted(works, key=lambda w: w.work_id)

    if explicit is not None:
        unknown = set(explicit) - {w.work_id for w in ordered}
        if unknown:
            raise ValidationError({"allocations": f"Allocations reference unselected works: {sorted(unknown)}."})

    available = amount
    lines: list[AllocatedWork] = []
    warnings: list[str] = []

    for w in ordered:
        unpaid = max(to_money(w.unpaid), ZERO)
        max_allocatable = unpaid

        if explicit is None:
            allocated = min(unpaid, available)
        else:
            allocated = to_money(explicit.get(w.work_id, ZERO), field="allocations")
            if allocated < ZERO:
                raise ValidationError({"allocations": f"Allocation for work {w.work_id} must be >= 0."})
            if allocated > unpaid:
                raise AllocationExceedsUnpaid(
                    details={"work_id": w.work_id, "unpaid": str(unpaid), "requested": str(allocated)}
                )
            if allocated > available:
                raise AllocationExceedsPayment(
                    details={"work_id": w.work_id, "available": str(available), "requested": str(allocated)}
                )

        if unpaid == ZERO:
            warnings.append(f"{w.work_label} is already fully paid.")

        available -= allocated
        lines.append(
            AllocatedWork(
                work_id=w.work_id,
                work_label=w.work_label,
                price=to_money(w.price),
                already_paid=to_money(w.already_paid),
                unpaid=unpaid,
                max_allocatable=max_allocatable,
                allocated=allocated,
            )
        )

    total_allocated = money_sum(l.allocated for l in lines)
    remaining = amount - total_allocated

    if remaining > ZERO:
        warnings.append(f"{remaining} is not allocated to any work and must be confirmed as client credit.")

    return AllocationPlan(
        payment_amount=amount,
        lines=lines,
        total_unpaid_selected=money_sum(l.unpaid for l in lines),
        total_allocated=total_allocated,
        remaining_unallocated=remaining,
        warnings=warnings,
    )
