# backend/lab_core/conftest.py
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from lab_core.clients.models import Client
from lab_core.pricing.models import FixedBasePrice, PricingRule
from lab_core.works.models import (
    BridgeTooth,
    BridgeWork,
    BuildingTechnique,
    Constitution,
    CrownWork,
    Work,
    WorkFamily,
    WorkKind,
)


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(username="cashier", password="testpass", is_active=True)


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def lab_client(db):
    return Client.objects.create(display_name="Clinica Dental Norte")


@pytest.fixture
def other_client(db):
    return Client.objects.create(display_name="Consultorio Sur")


@pytest.fixture
def make_crown(db):
    def _make(
        client,
        *,
        constitution=Constitution.MONOLITHIC,
        technique=BuildingTechnique.DIGITAL,
        core_material_id=None,
        tooth_number=11,
    ):
        work = Work.objects.create(
            client=client,
            family=WorkFamily.FIXED_PROSTHESIS,
            work_type="CROWN",
            kind=WorkKind.CROWN,
        )
        CrownWork.objects.create(
            work=work,
            constitution=constitution,
            building_technique=technique,
            core_material_id=core_material_id,
            tooth_number=tooth_number,
        )
        return work

    return _make


@pytest.fixture
def make_bridge(db):
    def _make(client, *, teeth=(14, 15, 16), constitution=Constitution.STRATIFIED, technique=BuildingTechnique.ANALOG):
        work = Work.objects.create(
            client=client,
            family=WorkFamily.FIXED_PROSTHESIS,
            work_type="BRIDGE",
            kind=WorkKind.BRIDGE,
        )
        bridge = BridgeWork.objects.create(work=work, constitution=constitution, building_technique=technique)
        for n in teeth:
            BridgeTooth.objects.create(bridge=bridge, tooth_number=n)
        return work

    return _make


@pytest.fixture
def make_rule(db):
    def _make(**overrides):
        data = {
            "family": WorkFamily.FIXED_PROSTHESIS,
            "work_type": "CROWN",
            "price_group": "DEFAULT",
            "base_price": None,
            "price_per_unit": None,
            "currency": "MXN",
            "valid_from": date(2024, 1, 1),
        }
        data.update(overrides)
        return PricingRule.objects.create(**data)

    return _make


@pytest.fixture
def priced_work(make_crown):
    """
    Crown with a fixed base price, bypassing rule resolution.
    """
    def _make(client, amount="1000.00"):
        work = make_crown(client)
        FixedBasePrice.objects.create(work=work, amount=Decimal(amount), currency="MXN", price_group="DEFAULT")
        return work

    return _make
