# backend/lab_core/pricing/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lab_core.common.money import ZERO, money_sum, to_money
from lab_core.pricing.exceptions import AlreadyFixed, NegativeFinalPrice, NoBasePriceFixed
from lab_core.pricing.models import FixedBasePrice, PriceOverride
from lab_core.pricing.resolver import BasePriceResult, PriceRuleResolver
from lab_core.pricing.selectors import fixed_price_for_work, overrides_for
from lab_core.works.pricing_views import pricing_view_for
from lab_core.works.selectors import get_work

logger = logging.getLogger(__name__)


def default_currency() -> str:
    return getattr(settings, "LAB_DEFAULT_CURRENCY", "MXN")


def default_price_group() -> str:
    return getattr(settings, "LAB_DEFAULT_PRICE_GROUP", "DEFAULT")


@dataclass(frozen=True)
class OverrideTrace:
    override_id: int
    adjustment: Decimal
    reason: str
    created_at: datetime
    created_by_user_id: int | None


@dataclass(frozen=True)
class FinalPrice:
    work_id: int
    fixed_price_id: int
    base_price: Decimal
    overrides_total: Decimal
    final_price: Decimal
    currency: str
    price_group: str
    overrides: list[OverrideTrace]


class BasePriceService:
    @staticmethod
    def preview(
        *,
        work_id: int,
        price_group: str | None = None,
        pricing_date: date | None = None,
    ) -> BasePriceResult:
        work = get_work(work_id=work_id)
        return PriceRuleResolver.resolve(
            view=pricing_view_for(work),
            price_group=price_group or default_price_group(),
            pricing_date=pricing_date or timezone.localdate(),
        )

    @staticmethod
    @transaction.atomic
    def fix(*, work_id: int, previewed: BasePriceResult) -> FixedBasePrice:
        """
        Persist a previewed base price verbatim. The resolver is not re-run:
        what the user confirmed is what gets stored.
        """
        work = get_work(work_id=work_id)

        amount = to_money(previewed.base_price, field="base_price")
        if amount < 0:
            raise ValidationError({"base_price": "Base price must be >= 0."})

        if fixed_price_for_work(work_id=work.id) is not None:
            raise AlreadyFixed(details={"work_id": work.id})

        try:
            with transaction.atomic():
                fixed = FixedBasePrice.objects.create(
                    work=work,
                    amount=amount,
                    currency=previewed.currency or default_currency(),
                    price_group=previewed.price_group or default_price_group(),
                    source_rule_id=previewed.rule_id,
                )
        except IntegrityError:
            # Concurrent fix for the same work won.
            raise AlreadyFixed(details={"work_id": work.id})

        logger.info("Fixed base price work=%s amount=%s %s rule=%s", work.id, amount, fixed.currency, previewed.rule_id)
        return fixed


class PriceOverrideService:
    @staticmethod
    @transaction.atomic
    def add_override(
        *,
        work_id: int,
        adjustment: Decimal,
        reason: str,
        created_by_user_id: int | None = None,
    ) -> PriceOverride:
        adjustment = to_money(adjustment, field="adjustment")
        if adjustment == ZERO:
            raise ValidationError({"adjustment": "Adjustment must be non-zero."})

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError({"reason": "Reason is required."})

        fixed = FixedBasePrice.objects.select_for_update().filter(work_id=work_id).first()
        if fixed is None:
            get_work(work_id=work_id)
            raise NoBasePriceFixed(details={"work_id": work_id})

        current_total = money_sum(o.adjustment for o in overrides_for(fixed_price_id=fixed.id))
        new_final = fixed.amount + current_total + adjustment
        if new_final < ZERO:
            raise NegativeFinalPrice(
                details={
                    "work_id": work_id,
                    "current_final_price": str(fixed.amount + current_total),
                    "adjustment": str(adjustment),
                }
            )

        override = PriceOverride.objects.create(
            fixed_base_price=fixed,
            adjustment=adjustment,
            reason=reason,
            created_by_user_id=created_by_user_id,
        )
        logger.info("Price override work=%s adjustment=%s final=%s", work_id, adjustment, new_final)
        return override


class FinalPriceResolver:
    @staticmethod
    def resolve(*, work_id: int) -> FinalPrice:
        fixed = fixed_price_for_work(work_id=work_id)
        if fixed is None:
            get_work(work_id=work_id)
            raise NoBasePriceFixed(details={"work_id": work_id})

        traces = [
            OverrideTrace(
                override_id=o.id,
                adjustment=o.adjustment,
                reason=o.reason,
                created_at=o.created_at,
                created_by_user_id=o.created_by_user_id,
            )
            for o in overrides_for(fixed_price_id=fixed.id)
        ]
        overrides_total = money_sum(t.adjustment for t in traces)
        base = to_money(fixed.amount)

        return FinalPrice(
            work_id=work_id,
            fixed_price_id=fixed.id,
            base_price=base,
            overrides_total=overrides_total,
            final_price=to_money(base + overrides_total),
            currency=fixed.currency,
            price_group=fixed.price_group,
            overrides=traces,
        )
