# backend/lab_core/balances/exceptions.py
from __future__ import annotations

from lab_core.common.api.exceptions import InvariantViolation


class InsufficientBalance(InvariantViolation):
    default_detail = "Client balance is lower than the requested debit."
    default_code = "insufficient_balance"


class BalanceInactive(InvariantViolation):
    default_detail = "Client balance is not active."
    default_code = "balance_inactive"


class LedgerInconsistency(InvariantViolation):
    default_detail = "Client ledger sums to a negative balance."
    default_code = "ledger_inconsistency"
