from __future__ import annotations

from django.contrib import admin

from lims_core.suppliers.models import Supplier, SupplierLedger


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "contact_person", "phone", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "contact_person", "phone")


@admin.register(SupplierLedger)
class SupplierLedgerAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "supplier",
        "transaction_date",
        "invoice_number",
        "invoice_date",
        "due_date",
        "bill_amount",
        "paid_amount",
        "balance_due",
    )
    list_filter = ("transaction_date",)
    search_fields = ("supplier__name", "invoice_number")
    ordering = ("-transaction_date",)
    readonly_fields = ("balance_due",)
    list_select_related = ("supplier",)
