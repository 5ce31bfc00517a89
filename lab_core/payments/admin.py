# backend/lab_core/payments/admin.py
from __future__ import annotations

from django.contrib import admin

from lab_core.payments.models import Payment, PaymentAllocation


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("work", "amount_applied", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "amount_total", "currency", "method", "status", "received_at", "idempotency_key")
    list_filter = ("method", "status", "received_at")
    search_fields = ("id", "reference", "idempotency_key", "client__display_name")
    inlines = (PaymentAllocationInline,)
    ordering = ("-received_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
