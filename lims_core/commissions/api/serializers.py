from __future__ import annotations

from rest_framework import serializers

from lims_core.commissions.models import CommissionLedger


class CommissionLedgerSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source="doctor.name", read_only=True)

    class Meta:
        model = CommissionLedger
        fields = [
            "id",
            "doctor",
            "doctor_name",
            "order",
            "transaction_date",
            "commission_rate",
            "calculated_amount",
            "paid_amount",
            "payment_date",
            "status",
        ]
        read_only_fields = fields


class MarkPaidSerializer(serializers.Serializer):
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_date = serializers.DateField(required=False, allow_null=True)


class DoctorCommissionRowSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField()
    doctor_name = serializers.CharField()
    total_bill = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_due = serializers.DecimalField(max_digits=14, decimal_places=2)


class CommissionTotalsSerializer(serializers.Serializer):
    total_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_due = serializers.DecimalField(max_digits=14, decimal_places=2)


class CommissionSummarySerializer(serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    rows = DoctorCommissionRowSerializer(many=True)
    totals = CommissionTotalsSerializer()
