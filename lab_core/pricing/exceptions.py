# backend/lab_core/pricing/exceptions.py
from __future__ import annotations

from lab_core.common.api.exceptions import InvariantViolation


class NoMatchingRule(InvariantViolation):
    default_detail = "No pricing rule matches this work."
    default_code = "no_matching_rule"


class InvalidRuleDefinition(InvariantViolation):
    default_detail = "Pricing rule cannot produce a price."
    default_code = "invalid_rule_definition"


class AlreadyFixed(InvariantViolation):
    default_detail = "Base price is already fixed for this work."
    default_code = "already_fixed"


class NoBasePriceFixed(InvariantViolation):
    default_detail = "Work has no fixed base price."
    default_code = "no_base_price_fixed"


class NegativeFinalPrice(InvariantViolation):
    default_detail = "Override would make the final price negative."
    default_code = "negative_final_price"
