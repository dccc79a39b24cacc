from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from lims_core.suppliers.models import Supplier, SupplierLedger


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ["id", "name", "contact_person", "phone", "address", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]


class SupplierLedgerSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)

    class Meta:
        model = SupplierLedger
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "transaction_date",
            "invoice_number",
            "invoice_date",
            "due_date",
            "description",
            "bill_amount",
            "paid_amount",
            "balance_due",
            "created_at",
        ]
        read_only_fields = fields


class SupplierTransactionCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    bill_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    transaction_date = serializers.DateField(required=False, allow_null=True)
    invoice_number = serializers.CharField(required=False, allow_blank=True, default="")
    invoice_date = serializers.DateField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class SupplierPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class SupplierSummaryRowSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    supplier_name = serializers.CharField()
    total_bill = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_due = serializers.DecimalField(max_digits=14, decimal_places=2)
    latest_invoice_number = serializers.CharField(allow_blank=True)
    latest_due_date = serializers.DateField(allow_null=True)


class SupplierTotalsSerializer(serializers.Serializer):
    total_bill = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_due = serializers.DecimalField(max_digits=14, decimal_places=2)


class SupplierSummarySerializer(serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    rows = SupplierSummaryRowSerializer(many=True)
    totals = SupplierTotalsSerializer()
