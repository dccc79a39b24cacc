# lims_core/orders/api/serializers.py
from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from lims_core.orders.models import LineItem, Order, OrderPayment, PaymentMethod


class LineItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = LineItem
        fields = [
            "id",
            "position",
            "test",
            "test_name",
            "unit",
            "min_range",
            "max_range",
            "price",
            "result_value",
            "is_abnormal",
            "remarks",
            "performed_by",
            "performed_at",
        ]
        read_only_fields = fields


class OrderPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderPayment
        fields = ["id", "amount", "method", "reference", "received_at", "recorded_by"]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    doctor_name = serializers.CharField(source="doctor.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "patient",
            "patient_name",
            "doctor",
            "doctor_name",
            "ordered_at",
            "status",
            "total_amount",
            "discount_amount",
            "paid_amount",
            "balance_due",
            "report_delivered",
            "delivery_date",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    line_items = LineItemSerializer(many=True, read_only=True)
    payments = OrderPaymentSerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + [
            "completed_at",
            "cancelled_at",
            "cancel_reason",
            "created_by",
            "line_items",
            "payments",
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    doctor_id = serializers.IntegerField(required=False, allow_null=True)
    test_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cash_paid = serializers.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = serializers.CharField(required=False, allow_blank=True, default="")


class ResultEntrySerializer(serializers.Serializer):
    line_item_id = serializers.IntegerField()
    value = serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=False)


class ResultsSubmitSerializer(serializers.Serializer):
    """
    Either one result:  {"line_item_id": 5, "value": "12.4"}
    or a batch:         {"results": [{"line_item_id": 5, "value": "12.4"}, ...]}
    """
    line_item_id = serializers.IntegerField(required=False)
    value = serializers.CharField(required=False, max_length=255, allow_blank=True, trim_whitespace=False)
    results = ResultEntrySerializer(many=True, required=False)

    def validate(self, attrs):
        if "results" in attrs:
            return attrs
        if "line_item_id" not in attrs or "value" not in attrs:
            raise serializers.ValidationError("Provide line_item_id and value, or a results list.")
        return attrs


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class DeliverSerializer(serializers.Serializer):
    collect_payment_first = serializers.BooleanField(default=False)
    payment_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
