from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from lims_core.common.api.pagination import paginate
from lims_core.common.api.params import date_range_params, int_or_none
from lims_core.iam.identity import current_user_identity
from lims_core.suppliers.api.serializers import (
    SupplierLedgerSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
    SupplierSummarySerializer,
    SupplierTransactionCreateSerializer,
)
from lims_core.suppliers.models import Supplier, SupplierLedger
from lims_core.suppliers.selectors import (
    ledger_entries,
    list_suppliers,
    summarize_by_supplier,
    supplier_totals,
)
from lims_core.suppliers.services import SupplierLedgerService

DATE_RANGE_PARAMS = [
    OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("supplier_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
]


class SupplierViewSet(viewsets.GenericViewSet):
    serializer_class = SupplierSerializer
    queryset = Supplier.objects.none()

    @extend_schema(tags=["Suppliers"], responses={200: SupplierSerializer(many=True)})
    def list(self, request):
        return paginate(request, list_suppliers(), SupplierSerializer)

    @extend_schema(tags=["Suppliers"], request=SupplierSerializer, responses={201: SupplierSerializer})
    def create(self, request):
        ser = SupplierSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        supplier = ser.save()
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Suppliers"], parameters=DATE_RANGE_PARAMS, responses={200: SupplierSummarySerializer})
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        date_from, date_to = date_range_params(request)
        rows = summarize_by_supplier(
            date_from=date_from,
            date_to=date_to,
            supplier_id=int_or_none(request.query_params.get("supplier_id"), "supplier_id"),
        )
        out = SupplierSummarySerializer(
            {"date_from": date_from, "date_to": date_to, "rows": rows, "totals": supplier_totals(rows)}
        ).data
        return Response(out, status=status.HTTP_200_OK)


class SupplierLedgerViewSet(viewsets.GenericViewSet):
    """
    Supplier accounts payable:
    - list/create transactions
    - apply a payment to one transaction
    """
    serializer_class = SupplierLedgerSerializer
    queryset = SupplierLedger.objects.none()

    @extend_schema(tags=["Suppliers"], parameters=DATE_RANGE_PARAMS, responses={200: SupplierLedgerSerializer(many=True)})
    def list(self, request):
        date_from, date_to = date_range_params(request)
        qs = ledger_entries(
            date_from=date_from,
            date_to=date_to,
            supplier_id=int_or_none(request.query_params.get("supplier_id"), "supplier_id"),
        )
        return paginate(request, qs, SupplierLedgerSerializer)

    @extend_schema(
        tags=["Suppliers"],
        request=SupplierTransactionCreateSerializer,
        responses={201: SupplierLedgerSerializer},
    )
    def create(self, request):
        ser = SupplierTransactionCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = SupplierLedgerService.record_transaction(
            actor=current_user_identity(request.user),
            **ser.validated_data,
        )
        return Response(SupplierLedgerSerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Suppliers"], request=SupplierPaymentSerializer, responses={200: SupplierLedgerSerializer})
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        ser = SupplierPaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = SupplierLedgerService.apply_payment(
            entry_id=int_or_none(pk, "id"),
            amount=ser.validated_data["amount"],
            actor=current_user_identity(request.user),
        )
        return Response(SupplierLedgerSerializer(entry).data, status=status.HTTP_200_OK)
