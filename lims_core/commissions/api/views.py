from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from lims_core.commissions.api.serializers import (
    CommissionLedgerSerializer,
    CommissionSummarySerializer,
    MarkPaidSerializer,
)
from lims_core.commissions.models import CommissionLedger
from lims_core.commissions.selectors import commission_entries, commission_totals, summarize_by_doctor
from lims_core.commissions.services import CommissionLedgerService
from lims_core.common.api.pagination import paginate
from lims_core.common.api.params import date_range_params, int_or_none
from lims_core.iam.identity import current_user_identity

DATE_RANGE_PARAMS = [
    OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("doctor_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
]


class CommissionViewSet(viewsets.GenericViewSet):
    serializer_class = CommissionLedgerSerializer
    queryset = CommissionLedger.objects.none()

    @extend_schema(
        tags=["Commissions"],
        parameters=DATE_RANGE_PARAMS
        + [OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False)],
        responses={200: CommissionLedgerSerializer(many=True)},
    )
    def list(self, request):
        date_from, date_to = date_range_params(request)
        qs = commission_entries(
            date_from=date_from,
            date_to=date_to,
            doctor_id=int_or_none(request.query_params.get("doctor_id"), "doctor_id"),
            status=request.query_params.get("status") or None,
        )
        return paginate(request, qs, CommissionLedgerSerializer)

    @extend_schema(tags=["Commissions"], parameters=DATE_RANGE_PARAMS, responses={200: CommissionSummarySerializer})
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        date_from, date_to = date_range_params(request)
        doctor_id = int_or_none(request.query_params.get("doctor_id"), "doctor_id")

        out = CommissionSummarySerializer(
            {
                "date_from": date_from,
                "date_to": date_to,
                "rows": summarize_by_doctor(date_from=date_from, date_to=date_to, doctor_id=doctor_id),
                "totals": commission_totals(date_from=date_from, date_to=date_to, doctor_id=doctor_id),
            }
        ).data
        return Response(out, status=status.HTTP_200_OK)

    @extend_schema(tags=["Commissions"], request=MarkPaidSerializer, responses={200: CommissionLedgerSerializer})
    @action(detail=True, methods=["post"], url_path="mark_paid")
    def mark_paid(self, request, pk=None):
        ser = MarkPaidSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = CommissionLedgerService.mark_paid(
            entry_id=int_or_none(pk, "id"),
            paid_amount=ser.validated_data["paid_amount"],
            payment_date=ser.validated_data.get("payment_date"),
            actor=current_user_identity(request.user),
        )
        return Response(CommissionLedgerSerializer(entry).data, status=status.HTTP_200_OK)
