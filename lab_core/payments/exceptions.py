# backend/lab_core/payments/exceptions.py
from __future__ import annotations

from lab_core.common.api.exceptions import InvariantViolation


class AllocationExceedsUnpaid(InvariantViolation):
    default_detail = "Allocation exceeds the work's unpaid amount."
    default_code = "allocation_exceeds_unpaid"


class AllocationExceedsPayment(InvariantViolation):
    default_detail = "Allocations exceed the payment amount."
    default_code = "allocation_exceeds_payment"


class UnconfirmedRemainder(InvariantViolation):
    default_detail = "Unallocated remainder must be explicitly moved to the client balance."
    default_code = "unconfirmed_remainder"


class IdempotencyKeyConflict(InvariantViolation):
    default_detail = "Idempotency key already used for another client."
    default_code = "idempotency_key_conflict"
