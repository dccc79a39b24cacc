from __future__ import annotations

from rest_framework import serializers

from lims_core.finance.models import EntryType, LedgerPaymentMethod, Payment
from lims_core.orders.api.serializers import OrderListSerializer


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "type",
            "category",
            "description",
            "amount",
            "transaction_date",
            "payment_method",
            "recorded_by",
            "created_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=EntryType.choices)
    category = serializers.CharField(max_length=64)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=LedgerPaymentMethod.choices, default=LedgerPaymentMethod.CASH)


class RevenueReportSerializer(serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    order_count = serializers.IntegerField()
    orders = OrderListSerializer(many=True)


class FinanceTransactionSerializer(serializers.Serializer):
    source_id = serializers.CharField()
    date = serializers.DateField()
    type = serializers.CharField()
    category = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    status = serializers.CharField()


class CategorySummarySerializer(serializers.Serializer):
    category = serializers.CharField()
    type = serializers.CharField()
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
