# backend/lab_core/works/pricing_views.py
"""
Uniform pricing projection over the work extension tables.

Each work kind (crown, bridge, ...) registers one provider keyed by
`Work.kind`. Pricing code only ever sees a WorkPricingView and never
touches the extension tables directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lab_core.common.api.exceptions import InvariantViolation
from lab_core.works.models import BridgeWork, CrownWork, Work, WorkKind


class UnsupportedWorkKind(InvariantViolation):
    default_detail = "Work kind has no pricing view."
    default_code = "unsupported_work_kind"


@dataclass(frozen=True)
class WorkPricingView:
    work_id: int
    family: str
    work_type: str
    constitution: str | None
    building_technique: str | None
    core_material_id: int | None
    unit_count: int


PricingViewProvider = Callable[[Work], WorkPricingView]

_PROVIDERS: dict[str, PricingViewProvider] = {}


def register(kind: str):
    def deco(fn: PricingViewProvider) -> PricingViewProvider:
        _PROVIDERS[kind] = fn
        return fn
    return deco


def pricing_view_for(work: Work) -> WorkPricingView:
    provider = _PROVIDERS.get(work.kind)
    if provider is None:
        raise UnsupportedWorkKind(details={"work_id": work.id, "kind": work.kind})
    return provider(work)


def _missing_extension(work: Work) -> UnsupportedWorkKind:
    return UnsupportedWorkKind(
        f"Work {work.id} has no {work.kind.lower()} details.",
        details={"work_id": work.id, "kind": work.kind},
    )


@register(WorkKind.CROWN)
def crown_view(work: Work) -> WorkPricingView:
    crown = CrownWork.objects.filter(work_id=work.id).first()
    if crown is None:
        raise _missing_extension(work)
    return WorkPricingView(
        work_id=work.id,
        family=work.family,
        work_type=work.work_type,
        constitution=crown.constitution,
        building_technique=crown.building_technique,
        core_material_id=crown.core_material_id,
        unit_count=1,
    )


@register(WorkKind.BRIDGE)
def bridge_view(work: Work) -> WorkPricingView:
    # A bridge is priced per unit with the crown tariff: one unit per tooth.
    bridge = BridgeWork.objects.filter(work_id=work.id).first()
    if bridge is None:
        raise _missing_extension(work)
    return WorkPricingView(
        work_id=work.id,
        family=work.family,
        work_type=WorkKind.CROWN.value,
        constitution=bridge.constitution,
        building_technique=bridge.building_technique,
        core_material_id=bridge.core_material_id,
        unit_count=bridge.teeth.count(),
    )
