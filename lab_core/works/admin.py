# backend/lab_core/works/admin.py
from __future__ import annotations

from django.contrib import admin

from lab_core.works.models import BridgeTooth, BridgeWork, CrownWork, Work


class CrownInline(admin.StackedInline):
    model = CrownWork
    extra = 0


class BridgeInline(admin.StackedInline):
    model = BridgeWork
    extra = 0


@admin.register(Work)
class WorkAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "family", "work_type", "kind", "created_at")
    list_filter = ("family", "kind")
    search_fields = ("id", "description", "client__display_name")
    inlines = (CrownInline, BridgeInline)
    ordering = ("-id",)


@admin.register(BridgeTooth)
class BridgeToothAdmin(admin.ModelAdmin):
    list_display = ("id", "bridge", "tooth_number", "role")
    list_filter = ("role",)
