# backend/lab_core/balances/selectors.py
from __future__ import annotations

from decimal import Decimal

from django.db.models import QuerySet, Sum

from lab_core.balances.models import BalanceMovement, ClientBalance, MovementType
from lab_core.common.money import ZERO, to_money


def client_balance(*, client_id: int) -> ClientBalance | None:
    return ClientBalance.objects.filter(client_id=client_id).first()


def movements_qs(*, client_id: int) -> QuerySet[BalanceMovement]:
    return BalanceMovement.objects.filter(client_id=client_id)


def movements_for_client(*, client_id: int) -> QuerySet[BalanceMovement]:
    return movements_qs(client_id=client_id).select_related("payment", "work").order_by("-created_at", "-id")


def ledger_sum(*, client_id: int) -> Decimal:
    total = movements_qs(client_id=client_id).aggregate(total=Sum("amount_change"))["total"]
    return to_money(total if total is not None else ZERO)


def balance_debits_for_work(*, work_id: int) -> Decimal:
    """
    Total credit applied to a work, as a positive amount.
    """
    total = BalanceMovement.objects.filter(
        work_id=work_id,
        movement_type=MovementType.APPLY_WORK,
    ).aggregate(total=Sum("amount_change"))["total"]
    return abs(to_money(total if total is not None else ZERO))
