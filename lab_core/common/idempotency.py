# backend/lab_core/common/idempotency.py
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from django.db import IntegrityError, transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEADER_META_KEY = "HTTP_IDEMPOTENCY_KEY"


def get_key(request) -> str | None:
    # In DRF test client: "HTTP_IDEMPOTENCY_KEY" becomes request.META["HTTP_IDEMPOTENCY_KEY"]
    return request.META.get(HEADER_META_KEY)


def insert_once(create: Callable[[], T], fetch_existing: Callable[[], T | None]) -> tuple[T, bool]:
    """
    Run `create` inside a savepoint. If a unique constraint rejects it because
    a concurrent writer won the race, roll back to the savepoint and return the
    winner's row instead.

    Returns (row, created). Must be called inside an outer transaction when
    the caller needs the rest of its work to roll back together.
    """
    try:
        with transaction.atomic():
            return create(), True
    except IntegrityError:
        existing = fetch_existing()
        if existing is None:
            # The conflict was not the uniqueness we were guarding.
            raise
        logger.info("Unique insert lost race; reusing %s id=%s", type(existing).__name__, _pk(existing))
        return existing, False


def _pk(obj: Any):
    return getattr(obj, "pk", None)
