# backend/lab_core/works/selectors.py
from __future__ import annotations

from typing import Iterable

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from lab_core.common.api.exceptions import OwnershipViolation
from lab_core.works.models import Work


def works_qs() -> QuerySet[Work]:
    return Work.objects.select_related("client")


def get_work(*, work_id: int) -> Work:
    work = works_qs().filter(id=work_id).first()
    if work is None:
        raise NotFound(f"Work {work_id} not found.")
    return work


def works_for_client(*, client_id: int, work_ids: Iterable[int]) -> list[Work]:
    """
    Ownership lookup: every requested id must exist and belong to client_id.

    Returns the works in ascending id order. Any miss rejects the whole set.
    """
    wanted = sorted(set(int(w) for w in work_ids))
    works = list(works_qs().filter(client_id=client_id, id__in=wanted).order_by("id"))
    if len(works) != len(wanted):
        found = {w.id for w in works}
        raise OwnershipViolation(
            details={
                "client_id": client_id,
                "work_ids": [w for w in wanted if w not in found],
            }
        )
    return works
