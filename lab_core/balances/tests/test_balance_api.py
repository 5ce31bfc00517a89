# backend/lab_core/balances/tests/test_balance_api.py
from decimal import Decimal

import pytest

from lab_core.balances.models import ClientBalance
from lab_core.balances.services import ClientBalanceService


@pytest.mark.django_db
def test_balance_snapshot_for_untouched_client(api_client, lab_client):
    r = api_client.get(f"/api/v1/clients/{lab_client.id}/balance/")

    assert r.status_code == 200
    assert r.data["amount"] == "0.00"
    assert r.data["ledger_amount"] == "0.00"
    assert r.data["active"] is True


@pytest.mark.django_db
def test_movements_listing_is_newest_first_and_filterable(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "500.00")
    ClientBalanceService.credit_balance(client_id=lab_client.id, amount=Decimal("300.00"))
    ClientBalanceService.apply_balance_to_work(client_id=lab_client.id, work_id=work.id, amount=Decimal("100.00"))

    r = api_client.get(f"/api/v1/clients/{lab_client.id}/balance/movements/")
    assert r.status_code == 200
    assert r.data["count"] == 2
    assert [m["movement_type"] for m in r.data["results"]] == ["APPLY_WORK", "PAY_EXCESS"]

    r = api_client.get(f"/api/v1/clients/{lab_client.id}/balance/movements/", {"movement_type": "PAY_EXCESS"})
    assert r.data["count"] == 1
    assert r.data["results"][0]["amount_change"] == "300.00"


@pytest.mark.django_db
def test_recompute_endpoint(api_client, lab_client):
    ClientBalanceService.credit_balance(client_id=lab_client.id, amount=Decimal("40.00"))
    ClientBalance.objects.filter(client=lab_client).update(amount=Decimal("1.00"))

    r = api_client.post(f"/api/v1/clients/{lab_client.id}/balance/recompute/")

    assert r.status_code == 200
    assert r.data["amount"] == "40.00"
    r = api_client.get(f"/api/v1/clients/{lab_client.id}/balance/")
    assert r.data["amount"] == r.data["ledger_amount"] == "40.00"


@pytest.mark.django_db
def test_apply_without_credit_is_conflict(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "500.00")

    r = api_client.post(
        f"/api/v1/clients/{lab_client.id}/balance/apply/",
        {"work_id": work.id, "amount": "50.00"},
        format="json",
    )

    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "insufficient_balance"
    assert err["kind"] == "invariant"


@pytest.mark.django_db
def test_balance_requires_authentication(lab_client):
    from rest_framework.test import APIClient

    r = APIClient().get(f"/api/v1/clients/{lab_client.id}/balance/")

    assert r.status_code == 401
