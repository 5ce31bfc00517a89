# backend/lab_core/balances/apps.py
from __future__ import annotations

from django.apps import AppConfig


class BalancesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lab_core.balances"
    label = "balances"
