# backend/lab_core/pricing/apps.py
from __future__ import annotations

from django.apps import AppConfig


class PricingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lab_core.pricing"
    label = "pricing"
