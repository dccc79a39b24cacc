from __future__ import annotations

from django.contrib import admin

from lims_core.orders.models import LineItem, Order, OrderPayment


class LineItemInline(admin.TabularInline):
    model = LineItem
    extra = 0
    fields = ("position", "test_name", "unit", "min_range", "max_range", "price", "result_value", "is_abnormal", "remarks")
    readonly_fields = ("test_name", "unit", "min_range", "max_range", "price")


class OrderPaymentInline(admin.TabularInline):
    model = OrderPayment
    extra = 0
    readonly_fields = ("amount", "method", "reference", "received_at", "recorded_by")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient",
        "doctor",
        "status",
        "total_amount",
        "discount_amount",
        "paid_amount",
        "balance_due",
        "report_delivered",
        "ordered_at",
    )
    list_filter = ("status", "report_delivered")
    search_fields = ("id", "patient__full_name", "patient__mrn")
    ordering = ("-ordered_at",)
    readonly_fields = ("total_amount", "paid_amount", "balance_due")
    list_select_related = ("patient", "doctor")
    inlines = [LineItemInline, OrderPaymentInline]
