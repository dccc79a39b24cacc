from __future__ import annotations

from django.contrib import admin

from lims_core.commissions.models import CommissionLedger


@admin.register(CommissionLedger)
class CommissionLedgerAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "doctor",
        "order",
        "transaction_date",
        "commission_rate",
        "calculated_amount",
        "paid_amount",
        "payment_date",
        "status",
    )
    list_filter = ("status", "transaction_date")
    search_fields = ("doctor__name", "order__id")
    ordering = ("-transaction_date",)
    readonly_fields = ("doctor", "order", "transaction_date", "commission_rate", "calculated_amount")
    list_select_related = ("doctor", "order")
