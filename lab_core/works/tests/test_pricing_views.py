# backend/lab_core/works/tests/test_pricing_views.py
import pytest

from lab_core.common.api.exceptions import OwnershipViolation
from lab_core.works.models import Work, WorkFamily, WorkKind
from lab_core.works.pricing_views import UnsupportedWorkKind, pricing_view_for
from lab_core.works.selectors import works_for_client


@pytest.mark.django_db
def test_crown_view_is_one_unit(lab_client, make_crown):
    work = make_crown(lab_client, core_material_id=7)

    view = pricing_view_for(work)

    assert view.work_id == work.id
    assert view.family == WorkFamily.FIXED_PROSTHESIS
    assert view.work_type == "CROWN"
    assert view.constitution == "MONOLITHIC"
    assert view.building_technique == "DIGITAL"
    assert view.core_material_id == 7
    assert view.unit_count == 1


@pytest.mark.django_db
def test_bridge_view_counts_teeth_and_prices_as_crowns(lab_client, make_bridge):
    work = make_bridge(lab_client, teeth=(21, 22, 23, 24))

    view = pricing_view_for(work)

    assert view.work_type == "CROWN"
    assert view.unit_count == 4
    assert view.constitution == "STRATIFIED"


@pytest.mark.django_db
def test_work_without_extension_has_no_pricing_view(lab_client):
    work = Work.objects.create(
        client=lab_client,
        family=WorkFamily.FIXED_PROSTHESIS,
        work_type="CROWN",
        kind=WorkKind.CROWN,
    )

    with pytest.raises(UnsupportedWorkKind):
        pricing_view_for(work)


@pytest.mark.django_db
def test_works_for_client_returns_ascending_ids(lab_client, make_crown):
    w1 = make_crown(lab_client)
    w2 = make_crown(lab_client)
    w3 = make_crown(lab_client)

    works = works_for_client(client_id=lab_client.id, work_ids=[w3.id, w1.id, w2.id, w1.id])

    assert [w.id for w in works] == [w1.id, w2.id, w3.id]


@pytest.mark.django_db
def test_works_for_client_rejects_foreign_work(lab_client, other_client, make_crown):
    mine = make_crown(lab_client)
    theirs = make_crown(other_client)

    with pytest.raises(OwnershipViolation) as exc:
        works_for_client(client_id=lab_client.id, work_ids=[mine.id, theirs.id])

    assert exc.value.details["work_ids"] == [theirs.id]


@pytest.mark.django_db
def test_works_for_client_rejects_missing_work(lab_client, make_crown):
    mine = make_crown(lab_client)

    with pytest.raises(OwnershipViolation):
        works_for_client(client_id=lab_client.id, work_ids=[mine.id, 999999])
