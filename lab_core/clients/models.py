# backend/lab_core/clients/models.py
from __future__ import annotations

from django.db import models

from lab_core.common.models import TimeStampedModel


class Client(TimeStampedModel):
    """
    Dentist or clinic ordering work from the lab. Owned by the client
    directory; the finance core only reads it.
    """
    display_name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "clients_client"
        ordering = ["display_name", "id"]

    def __str__(self) -> str:
        return self.display_name
