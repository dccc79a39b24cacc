from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from lims_core.common.api.pagination import paginate
from lims_core.common.api.params import date_range_params
from lims_core.finance.api.serializers import (
    CategorySummarySerializer,
    FinanceTransactionSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    RevenueReportSerializer,
)
from lims_core.finance.models import Payment
from lims_core.finance.selectors import (
    category_summary,
    finance_transactions,
    list_entries,
    revenue_report,
)
from lims_core.finance.services import FinanceService
from lims_core.iam.identity import current_user_identity

DATE_RANGE_PARAMS = [
    OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
]


class LedgerEntryViewSet(viewsets.GenericViewSet):
    serializer_class = PaymentSerializer
    queryset = Payment.objects.none()

    @extend_schema(
        tags=["Finance"],
        parameters=DATE_RANGE_PARAMS
        + [
            OpenApiParameter("type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("category", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: PaymentSerializer(many=True)},
    )
    def list(self, request):
        date_from, date_to = date_range_params(request)
        qs = list_entries(
            date_from=date_from,
            date_to=date_to,
            type=request.query_params.get("type") or None,
            category=request.query_params.get("category") or None,
        )
        return paginate(request, qs, PaymentSerializer)

    @extend_schema(tags=["Finance"], request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request):
        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = FinanceService.record_entry(actor=current_user_identity(request.user), **ser.validated_data)
        return Response(PaymentSerializer(entry).data, status=status.HTTP_201_CREATED)


class FinanceReportViewSet(viewsets.GenericViewSet):
    """
    Read-only reports over orders, commissions, supplier bills and ledger entries.
    """
    serializer_class = FinanceTransactionSerializer
    queryset = Payment.objects.none()

    @extend_schema(
        tags=["Finance"],
        parameters=DATE_RANGE_PARAMS
        + [OpenApiParameter("outstanding_only", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False)],
        responses={200: RevenueReportSerializer},
    )
    @action(detail=False, methods=["get"], url_path="revenue")
    def revenue(self, request):
        date_from, date_to = date_range_params(request)
        outstanding_only = request.query_params.get("outstanding_only") in ("1", "true", "True")
        report = revenue_report(date_from=date_from, date_to=date_to, outstanding_only=outstanding_only)
        out = RevenueReportSerializer(
            {
                "date_from": date_from,
                "date_to": date_to,
                "total_revenue": report.total_revenue,
                "order_count": report.order_count,
                "orders": report.orders,
            }
        ).data
        return Response(out, status=status.HTTP_200_OK)

    @extend_schema(tags=["Finance"], parameters=DATE_RANGE_PARAMS, responses={200: FinanceTransactionSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="transactions")
    def transactions(self, request):
        date_from, date_to = date_range_params(request)
        rows = finance_transactions(date_from=date_from, date_to=date_to)
        return Response(FinanceTransactionSerializer(rows, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Finance"], parameters=DATE_RANGE_PARAMS, responses={200: CategorySummarySerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request):
        date_from, date_to = date_range_params(request)
        summary = category_summary(finance_transactions(date_from=date_from, date_to=date_to))
        return Response(CategorySummarySerializer(summary, many=True).data, status=status.HTTP_200_OK)
