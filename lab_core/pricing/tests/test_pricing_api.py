# backend/lab_core/pricing/tests/test_pricing_api.py
from decimal import Decimal

import pytest

from lab_core.pricing.models import FixedBasePrice


@pytest.mark.django_db
def test_preview_fix_and_final_over_http(api_client, lab_client, make_crown, make_rule):
    work = make_crown(lab_client)
    rule = make_rule(base_price=Decimal("1200.00"))

    r = api_client.post(f"/api/v1/works/{work.id}/pricing/preview/", {"pricing_date": "2025-01-15"}, format="json")
    assert r.status_code == 200, r.data
    assert r.data["base_price"] == "1200.00"
    assert r.data["rule_id"] == rule.id

    r = api_client.post(f"/api/v1/works/{work.id}/pricing/fix/", r.data, format="json")
    assert r.status_code == 201, r.data
    assert r.data["amount"] == "1200.00"

    r = api_client.post(
        f"/api/v1/works/{work.id}/pricing/overrides/",
        {"adjustment": "-200.00", "reason": "Remake discount"},
        format="json",
    )
    assert r.status_code == 201, r.data

    r = api_client.get(f"/api/v1/works/{work.id}/pricing/final/")
    assert r.status_code == 200
    assert r.data["base_price"] == "1200.00"
    assert r.data["overrides_total"] == "-200.00"
    assert r.data["final_price"] == "1000.00"
    assert r.data["overrides"][0]["reason"] == "Remake discount"


@pytest.mark.django_db
def test_second_fix_is_conflict_with_envelope(api_client, lab_client, make_crown):
    work = make_crown(lab_client)
    body = {"base_price": "500.00", "currency": "MXN", "price_group": "DEFAULT"}

    assert api_client.post(f"/api/v1/works/{work.id}/pricing/fix/", body, format="json").status_code == 201
    r = api_client.post(f"/api/v1/works/{work.id}/pricing/fix/", {**body, "base_price": "900.00"}, format="json")

    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "already_fixed"
    assert err["kind"] == "invariant"
    assert err["details"] == {"work_id": work.id}
    assert FixedBasePrice.objects.get(work=work).amount == Decimal("500.00")


@pytest.mark.django_db
def test_final_without_base_price_is_conflict(api_client, lab_client, make_crown):
    work = make_crown(lab_client)

    r = api_client.get(f"/api/v1/works/{work.id}/pricing/final/")

    assert r.status_code == 409
    assert r.json()["error"]["code"] == "no_base_price_fixed"


@pytest.mark.django_db
def test_preview_without_rule_is_conflict(api_client, lab_client, make_crown):
    work = make_crown(lab_client)

    r = api_client.post(f"/api/v1/works/{work.id}/pricing/preview/", {}, format="json")

    assert r.status_code == 409
    assert r.json()["error"]["code"] == "no_matching_rule"


@pytest.mark.django_db
def test_pricing_requires_authentication(lab_client, make_crown):
    from rest_framework.test import APIClient

    work = make_crown(lab_client)
    r = APIClient().get(f"/api/v1/works/{work.id}/pricing/final/")

    assert r.status_code == 401
    assert r.json()["error"]["code"] == "not_authenticated"
