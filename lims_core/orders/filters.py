# lims_core/orders/filters.py
from __future__ import annotations

import django_filters

from lims_core.orders.models import Order, OrderStatus


class OrderFilter(django_filters.FilterSet):
    patient_id = django_filters.NumberFilter(field_name="patient_id")
    doctor_id = django_filters.NumberFilter(field_name="doctor_id")
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    date_from = django_filters.DateFilter(field_name="ordered_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="ordered_at", lookup_expr="date__lte")
    report_delivered = django_filters.BooleanFilter()
    outstanding = django_filters.BooleanFilter(method="filter_outstanding")

    class Meta:
        model = Order
        fields = ["patient_id", "doctor_id", "status", "report_delivered"]

    def filter_outstanding(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(balance_due__gt=0)
        return queryset.filter(balance_due__lte=0)
