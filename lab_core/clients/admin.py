# backend/lab_core/clients/admin.py
from __future__ import annotations

from django.contrib import admin

from lab_core.clients.models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "display_name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("display_name",)
    ordering = ("display_name",)
