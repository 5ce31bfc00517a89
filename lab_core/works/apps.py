# backend/lab_core/works/apps.py
from __future__ import annotations

from django.apps import AppConfig


class WorksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lab_core.works"
    label = "works"
