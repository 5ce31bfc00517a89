# backend/lab_core/common/models.py
from __future__ import annotations

from django.db import models


class ImmutableRecordError(RuntimeError):
    pass


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all mutable entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class AppendOnlyModel(models.Model):
    """
    Rows are written once and never updated or deleted through the ORM.

    Corrections are new rows (overrides, new payments, ledger movements),
    never edits of existing ones.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f"{type(self).__name__} rows are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"{type(self).__name__} rows are append-only.")
