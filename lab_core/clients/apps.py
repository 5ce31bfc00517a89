# backend/lab_core/clients/apps.py
from __future__ import annotations

from django.apps import AppConfig


class ClientsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lab_core.clients"
    label = "clients"
