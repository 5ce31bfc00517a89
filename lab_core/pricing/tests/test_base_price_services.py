# backend/lab_core/pricing/tests/test_base_price_services.py
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import NotFound, ValidationError

from lab_core.common.models import ImmutableRecordError
from lab_core.pricing.exceptions import AlreadyFixed
from lab_core.pricing.models import FixedBasePrice
from lab_core.pricing.resolver import BasePriceResult
from lab_core.pricing.services import BasePriceService, FinalPriceResolver


@pytest.mark.django_db
def test_preview_uses_matching_rule_and_writes_nothing(lab_client, make_crown, make_rule):
    work = make_crown(lab_client)
    rule = make_rule(constitution="MONOLITHIC", base_price=Decimal("1500.00"))

    result = BasePriceService.preview(work_id=work.id, pricing_date=date(2025, 3, 1))

    assert result == BasePriceResult(
        base_price=Decimal("1500.00"),
        currency="MXN",
        price_group="DEFAULT",
        rule_id=rule.id,
    )
    assert not FixedBasePrice.objects.filter(work=work).exists()


@pytest.mark.django_db
def test_preview_unknown_work_is_not_found():
    with pytest.raises(NotFound):
        BasePriceService.preview(work_id=424242)


@pytest.mark.django_db
def test_fix_persists_previewed_value_verbatim(lab_client, make_crown, make_rule):
    work = make_crown(lab_client)
    make_rule(base_price=Decimal("1000.00"))
    previewed = BasePriceService.preview(work_id=work.id, pricing_date=date(2025, 3, 1))

    # A newer tariff appears between preview and fix; the confirmed value still wins.
    make_rule(base_price=Decimal("1300.00"), valid_from=date(2025, 2, 1))

    fixed = BasePriceService.fix(work_id=work.id, previewed=previewed)

    assert fixed.amount == Decimal("1000.00")
    assert fixed.source_rule_id == previewed.rule_id
    assert fixed.currency == "MXN"
    assert fixed.price_group == "DEFAULT"


@pytest.mark.django_db
def test_fix_twice_fails_and_keeps_first_value(lab_client, make_crown):
    work = make_crown(lab_client)
    first = BasePriceResult(base_price=Decimal("1000.00"), currency="MXN", price_group="DEFAULT", rule_id=None)
    second = BasePriceResult(base_price=Decimal("1800.00"), currency="MXN", price_group="DEFAULT", rule_id=None)

    BasePriceService.fix(work_id=work.id, previewed=first)
    with pytest.raises(AlreadyFixed):
        BasePriceService.fix(work_id=work.id, previewed=second)

    assert FixedBasePrice.objects.filter(work=work).count() == 1
    assert FixedBasePrice.objects.get(work=work).amount == Decimal("1000.00")


@pytest.mark.django_db
def test_fix_rejects_negative_price(lab_client, make_crown):
    work = make_crown(lab_client)

    with pytest.raises(ValidationError):
        BasePriceService.fix(
            work_id=work.id,
            previewed=BasePriceResult(base_price=Decimal("-1.00"), currency="MXN", price_group="DEFAULT", rule_id=None),
        )


@pytest.mark.django_db
def test_fix_defaults_currency_and_group(lab_client, make_crown):
    work = make_crown(lab_client)

    fixed = BasePriceService.fix(
        work_id=work.id,
        previewed=BasePriceResult(base_price=Decimal("50.00"), currency="", price_group="", rule_id=None),
    )

    assert fixed.currency == "MXN"
    assert fixed.price_group == "DEFAULT"


@pytest.mark.django_db
def test_fixed_price_row_cannot_be_edited(lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")
    fixed = FixedBasePrice.objects.get(work=work)

    fixed.amount = Decimal("1.00")
    with pytest.raises(ImmutableRecordError):
        fixed.save()
    with pytest.raises(ImmutableRecordError):
        fixed.delete()


@pytest.mark.django_db
def test_bridge_lifecycle_priced_per_unit(lab_client, make_bridge, make_rule):
    work = make_bridge(lab_client, teeth=(14, 15, 16))
    make_rule(price_per_unit=Decimal("850.00"))

    previewed = BasePriceService.preview(work_id=work.id, pricing_date=date(2025, 3, 1))
    BasePriceService.fix(work_id=work.id, previewed=previewed)
    final = FinalPriceResolver.resolve(work_id=work.id)

    assert previewed.base_price == Decimal("2550.00")
    assert final.final_price == Decimal("2550.00")


@pytest.mark.django_db
def test_bridge_uses_flat_base_price_when_defined(lab_client, make_bridge, make_rule):
    work = make_bridge(lab_client, teeth=(14, 15, 16))
    make_rule(constitution="STRATIFIED", base_price=Decimal("3000.00"), price_per_unit=Decimal("850.00"))

    previewed = BasePriceService.preview(work_id=work.id, pricing_date=date(2025, 3, 1))

    assert previewed.base_price == Decimal("3000.00")


@pytest.mark.django_db
def test_fix_race_on_unique_work_raises_already_fixed(lab_client, make_crown, monkeypatch):
    from lab_core.pricing import services

    work = make_crown(lab_client)
    first = BasePriceResult(base_price=Decimal("1000.00"), currency="MXN", price_group="DEFAULT", rule_id=None)
    BasePriceService.fix(work_id=work.id, previewed=first)

    # The pre-check misses; the unique work column rejects the second row.
    monkeypatch.setattr(services, "fixed_price_for_work", lambda *, work_id: None)
    second = BasePriceResult(base_price=Decimal("1800.00"), currency="MXN", price_group="DEFAULT", rule_id=None)

    with pytest.raises(AlreadyFixed):
        BasePriceService.fix(work_id=work.id, previewed=second)

    assert FixedBasePrice.objects.filter(work=work).count() == 1
    assert FixedBasePrice.objects.get(work=work).amount == Decimal("1000.00")
