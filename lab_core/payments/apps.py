# backend/lab_core/payments/apps.py
from __future__ import annotations

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lab_core.payments"
    label = "payments"
