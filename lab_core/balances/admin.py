# backend/lab_core/balances/admin.py
from __future__ import annotations

from django.contrib import admin

from lab_core.balances.models import BalanceMovement, ClientBalance


@admin.register(ClientBalance)
class ClientBalanceAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "amount", "currency", "active", "updated_at")
    list_filter = ("active", "currency")
    search_fields = ("client__display_name",)
    ordering = ("client_id",)

    # Written only by ClientBalanceService under the row lock.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BalanceMovement)
class BalanceMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "amount_change", "movement_type", "payment", "work", "created_at")
    list_filter = ("movement_type", "created_at")
    search_fields = ("client__display_name", "note")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
