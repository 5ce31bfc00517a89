# backend/lab_core/pricing/resolver.py
"""
Price rule resolution. Read-only: callable any number of times for previews.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from lab_core.common.money import to_money
from lab_core.pricing.exceptions import InvalidRuleDefinition, NoMatchingRule
from lab_core.pricing.models import PricingRule
from lab_core.pricing.selectors import candidate_rules
from lab_core.works.pricing_views import WorkPricingView


@dataclass(frozen=True)
class BasePriceResult:
    base_price: Decimal
    currency: str
    price_group: str
    rule_id: int | None


def rule_matches(rule: PricingRule, view: WorkPricingView) -> bool:
    if rule.family != view.family or rule.work_type != view.work_type:
        return False
    for attr, value in (
        ("constitution", view.constitution),
        ("building_technique", view.building_technique),
        ("core_material_id", view.core_material_id),
    ):
        rule_value = getattr(rule, attr)
        if rule_value is not None and rule_value != value:
            return False
    return True


def specificity_key(rule: PricingRule) -> tuple:
    # constitution outranks technique, technique outranks material;
    # among equals the latest valid_from wins, then the newest rule.
    return (
        rule.constitution is not None,
        rule.building_technique is not None,
        rule.core_material_id is not None,
        rule.valid_from,
        rule.id or 0,
    )


def pick_best_rule(candidates: Iterable[PricingRule], view: WorkPricingView) -> PricingRule | None:
    matching = [r for r in candidates if rule_matches(r, view)]
    return max(matching, key=specificity_key, default=None)


def compute_base_price(rule: PricingRule, view: WorkPricingView) -> Decimal:
    if rule.base_price is not None:
        return to_money(rule.base_price, field="base_price")

    if rule.price_per_unit is not None:
        if view.unit_count <= 0:
            raise InvalidRuleDefinition(
                "Per-unit rule needs a positive unit count.",
                details={"rule_id": rule.id, "work_id": view.work_id, "unit_count": view.unit_count},
            )
        return to_money(rule.price_per_unit * view.unit_count, field="base_price")

    raise InvalidRuleDefinition(
        "Rule defines neither a base price nor a price per unit.",
        details={"rule_id": rule.id},
    )


class PriceRuleResolver:
    @staticmethod
    def resolve(*, view: WorkPricingView, price_group: str, pricing_date: date) -> BasePriceResult:
        candidates = candidate_rules(
            family=view.family,
            work_type=view.work_type,
            price_group=price_group,
            as_of=pricing_date,
            constitution=view.constitution,
            building_technique=view.building_technique,
            core_material_id=view.core_material_id,
        )
        rule = pick_best_rule(candidates, view)
        if rule is None:
            raise NoMatchingRule(
                details={
                    "work_id": view.work_id,
                    "family": view.family,
                    "work_type": view.work_type,
                    "price_group": price_group,
                    "pricing_date": pricing_date.isoformat(),
                }
            )

        return BasePriceResult(
            base_price=compute_base_price(rule, view),
            currency=rule.currency,
            price_group=rule.price_group,
            rule_id=rule.id,
        )
