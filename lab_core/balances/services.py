# backend/lab_core/balances/services.py
from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import ValidationError

from lab_core.balances.exceptions import BalanceInactive, InsufficientBalance, LedgerInconsistency
from lab_core.balances.models import BalanceMovement, ClientBalance, MovementType
from lab_core.balances.selectors import client_balance, ledger_sum
from lab_core.clients.models import Client
from lab_core.common.idempotency import insert_once
from lab_core.common.money import ZERO, to_money

logger = logging.getLogger(__name__)


def _positive(amount, field: str = "amount") -> Decimal:
    amount = to_money(amount, field=field)
    if amount <= ZERO:
        raise ValidationError({field: "Amount must be > 0."})
    return amount


class ClientBalanceService:
    """
    The only writer of ClientBalance and BalanceMovement.

    Every mutation locks the client's balance row first, so mutations for one
    client are serialized while different clients proceed in parallel.
    """

    @staticmethod
    def lock_or_create(*, client_id: int) -> ClientBalance:
        """
        SELECT ... FOR UPDATE the balance row, creating it at zero when absent.
        Must run inside a transaction.
        """
        row = ClientBalance.objects.select_for_update().filter(client_id=client_id).first()
        if row is not None:
            return row

        if not Client.objects.filter(id=client_id).exists():
            raise ValidationError({"client_id": f"Client {client_id} does not exist."})

        row, created = insert_once(
            lambda: ClientBalance.objects.create(
                client_id=client_id,
                amount=ZERO,
                currency=getattr(settings, "LAB_DEFAULT_CURRENCY", "MXN"),
                active=True,
            ),
            lambda: ClientBalance.objects.select_for_update().filter(client_id=client_id).first(),
        )
        if created:
            logger.info("Opened balance for client=%s", client_id)
        return row

    @staticmethod
    def _assert_active(balance: ClientBalance) -> None:
        if not balance.active:
            raise BalanceInactive(details={"client_id": balance.client_id})

    @staticmethod
    def _append(
        *,
        balance: ClientBalance,
        amount_change: Decimal,
        movement_type: str,
        payment_id: int | None,
        work_id: int | None,
        note: str,
    ) -> BalanceMovement:
        movement = BalanceMovement.objects.create(
            client_id=balance.client_id,
            amount_change=amount_change,
            movement_type=movement_type,
            payment_id=payment_id,
            work_id=work_id,
            note=note or "",
        )
        balance.amount = to_money(balance.amount + amount_change)
        balance.save(update_fields=["amount", "updated_at"])
        return movement

    @staticmethod
    @transaction.atomic
    def credit_balance(
        *,
        client_id: int,
        amount: Decimal,
        movement_type: str = MovementType.PAY_EXCESS,
        payment_id: int | None = None,
        work_id: int | None = None,
        note: str = "",
    ) -> BalanceMovement:
        amount = _positive(amount)

        balance = ClientBalanceService.lock_or_create(client_id=client_id)
        ClientBalanceService._assert_active(balance)

        movement = ClientBalanceService._append(
            balance=balance,
            amount_change=amount,
            movement_type=movement_type,
            payment_id=payment_id,
            work_id=work_id,
            note=note,
        )
        logger.info("Credited client=%s amount=%s balance=%s payment=%s", client_id, amount, balance.amount, payment_id)
        return movement

    @staticmethod
    @transaction.atomic
    def apply_balance_to_work(
        *,
        client_id: int,
        work_id: int,
        amount: Decimal,
        payment_id: int | None = None,
        note: str = "",
    ) -> BalanceMovement:
        amount = _positive(amount)

        balance = ClientBalanceService.lock_or_create(client_id=client_id)
        ClientBalanceService._assert_active(balance)

        if balance.amount < amount:
            raise InsufficientBalance(
                details={
                    "client_id": client_id,
                    "available": str(balance.amount),
                    "requested": str(amount),
                }
            )

        movement = ClientBalanceService._append(
            balance=balance,
            amount_change=-amount,
            movement_type=MovementType.APPLY_WORK,
            payment_id=payment_id,
            work_id=work_id,
            note=note,
        )
        logger.info("Debited client=%s work=%s amount=%s balance=%s", client_id, work_id, amount, balance.amount)
        return movement

    @staticmethod
    def get_current_balance(*, client_id: int) -> Decimal:
        row = client_balance(client_id=client_id)
        return to_money(row.amount) if row is not None else ZERO

    @staticmethod
    def get_ledger_balance(*, client_id: int) -> Decimal:
        return ledger_sum(client_id=client_id)

    @staticmethod
    @transaction.atomic
    def recompute_balance_cache(*, client_id: int) -> Decimal:
        balance = ClientBalanceService.lock_or_create(client_id=client_id)

        total = ledger_sum(client_id=client_id)
        if total < ZERO:
            raise LedgerInconsistency(details={"client_id": client_id, "ledger_sum": str(total)})

        if balance.amount != total:
            logger.warning("Balance cache drift client=%s cached=%s ledger=%s", client_id, balance.amount, total)
            balance.amount = total
            balance.save(update_fields=["amount", "updated_at"])
        return total

    @staticmethod
    @transaction.atomic
    def set_active(*, client_id: int, active: bool) -> ClientBalance:
        balance = ClientBalanceService.lock_or_create(client_id=client_id)
        if balance.active != active:
            balance.active = active
            balance.save(update_fields=["active", "updated_at"])
            logger.info("Balance client=%s active=%s", client_id, active)
        return balance
