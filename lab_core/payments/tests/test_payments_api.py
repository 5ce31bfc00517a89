# backend/lab_core/payments/tests/test_payments_api.py
from decimal import Decimal

import pytest

from lab_core.balances.services import ClientBalanceService
from lab_core.payments.models import Payment


def _register_body(client, work, *, amount="1000.00", allocated="1000.00", key="api-pay-0001", move=False):
    return {
        "client_id": client.id,
        "payment_amount": amount,
        "method": "CASH",
        "reference": "REC-1",
        "notes": "",
        "allocations": [{"work_id": work.id, "allocated_amount": allocated}],
        "move_remainder_to_balance": move,
        "idempotency_key": key,
    }


@pytest.mark.django_db
def test_preview_then_register_over_http(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")

    r = api_client.post(
        "/api/v1/payments/preview/",
        {"client_id": lab_client.id, "payment_amount": "1000.00", "work_ids": [work.id]},
        format="json",
    )
    assert r.status_code == 200, r.data
    assert r.data["total_allocated"] == "1000.00"
    assert r.data["remaining_unallocated"] == "0.00"
    assert r.data["requires_balance_confirmation"] is False
    assert r.data["per_work"][0]["allocated"] == "1000.00"

    r = api_client.post("/api/v1/payments/", _register_body(lab_client, work), format="json")
    assert r.status_code == 204

    r = api_client.get(f"/api/v1/works/{work.id}/balance/")
    assert r.status_code == 200
    assert r.data["status"] == "PAID"
    assert r.data["remaining"] == "0.00"


@pytest.mark.django_db
def test_replay_returns_same_acknowledgement(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")
    body = _register_body(lab_client, work, amount="1500.00", move=True)

    assert api_client.post("/api/v1/payments/", body, format="json").status_code == 204
    assert api_client.post("/api/v1/payments/", body, format="json").status_code == 204

    assert Payment.objects.count() == 1
    assert ClientBalanceService.get_current_balance(client_id=lab_client.id) == Decimal("500.00")


@pytest.mark.django_db
def test_idempotency_key_from_header(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")
    body = _register_body(lab_client, work)
    body.pop("idempotency_key")

    r = api_client.post("/api/v1/payments/", body, format="json", HTTP_IDEMPOTENCY_KEY="header-key-001")

    assert r.status_code == 204
    assert Payment.objects.get().idempotency_key == "header-key-001"


@pytest.mark.django_db
def test_missing_idempotency_key_is_validation_error(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")
    body = _register_body(lab_client, work)
    body.pop("idempotency_key")

    r = api_client.post("/api/v1/payments/", body, format="json")

    assert r.status_code == 400
    err = r.json()["error"]
    assert err["kind"] == "validation"
    assert "idempotency_key" in err["details"]


@pytest.mark.django_db
def test_unconfirmed_remainder_is_conflict(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")

    r = api_client.post("/api/v1/payments/", _register_body(lab_client, work, amount="1500.00"), format="json")

    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "unconfirmed_remainder"
    assert err["kind"] == "invariant"
    assert err["details"]["remaining_unallocated"] == "500.00"
    assert Payment.objects.count() == 0


@pytest.mark.django_db
def test_foreign_work_is_ownership_error(api_client, lab_client, other_client, priced_work):
    theirs = priced_work(other_client, "1000.00")

    r = api_client.post(
        "/api/v1/payments/preview/",
        {"client_id": lab_client.id, "payment_amount": "100.00", "work_ids": [theirs.id]},
        format="json",
    )

    assert r.status_code == 422
    assert r.json()["error"]["kind"] == "ownership"


@pytest.mark.django_db
def test_preview_with_string_keyed_overrides(api_client, lab_client, priced_work):
    w1 = priced_work(lab_client, "300.00")
    w2 = priced_work(lab_client, "500.00")

    r = api_client.post(
        "/api/v1/payments/preview/",
        {
            "client_id": lab_client.id,
            "payment_amount": "600.00",
            "work_ids": [w1.id, w2.id],
            "allocation_overrides": {str(w2.id): "500.00"},
        },
        format="json",
    )

    assert r.status_code == 200, r.data
    assert [l["allocated"] for l in r.data["per_work"]] == ["0.00", "500.00"]
    assert r.data["remaining_unallocated"] == "100.00"


@pytest.mark.django_db
def test_payment_detail_and_client_history(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "1000.00")
    api_client.post("/api/v1/payments/", _register_body(lab_client, work, allocated="400.00", amount="400.00"), format="json")
    api_client.post(
        "/api/v1/payments/",
        {**_register_body(lab_client, work, allocated="600.00", amount="600.00", key="api-pay-0002"), "method": "CARD"},
        format="json",
    )
    payment = Payment.objects.get(idempotency_key="api-pay-0001")

    r = api_client.get(f"/api/v1/payments/{payment.id}/")
    assert r.status_code == 200
    assert r.data["allocations"][0]["amount_applied"] == "400.00"

    r = api_client.get(f"/api/v1/clients/{lab_client.id}/payments/")
    assert r.status_code == 200
    assert r.data["count"] == 2

    r = api_client.get(f"/api/v1/clients/{lab_client.id}/payments/", {"method": "CARD"})
    assert r.data["count"] == 1
    assert r.data["results"][0]["idempotency_key"] == "api-pay-0002"


@pytest.mark.django_db
def test_unknown_payment_is_not_found(api_client):
    r = api_client.get("/api/v1/payments/987654/")

    assert r.status_code == 404
    assert r.json()["error"]["kind"] == "not_found"


@pytest.mark.django_db
def test_apply_balance_endpoint(api_client, lab_client, priced_work):
    work = priced_work(lab_client, "300.00")
    ClientBalanceService.credit_balance(client_id=lab_client.id, amount=Decimal("200.00"))

    r = api_client.post(
        f"/api/v1/clients/{lab_client.id}/balance/apply/",
        {"work_id": work.id, "amount": "200.00"},
        format="json",
    )
    assert r.status_code == 201, r.data
    assert r.data["amount_change"] == "-200.00"

    r = api_client.get(f"/api/v1/works/{work.id}/balance/")
    assert r.data["paid"] == "200.00"
    assert r.data["status"] == "PARTIALLY_PAID"
