from __future__ import annotations

from django.contrib import admin

from lims_core.finance.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "category", "amount", "transaction_date", "payment_method", "recorded_by")
    list_filter = ("type", "category", "payment_method")
    search_fields = ("category", "description")
    ordering = ("-transaction_date",)
