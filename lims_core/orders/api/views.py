# lims_core/orders/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from lims_core.common.api.exceptions import NotFoundError
from lims_core.common.api.pagination import paginate
from lims_core.common.api.params import int_or_none
from lims_core.common.idempotency import run_idempotent
from lims_core.iam.identity import current_user_identity
from lims_core.lab.services import ResultWorkflowService
from lims_core.orders.api.serializers import (
    CancelSerializer,
    DeliverSerializer,
    LineItemSerializer,
    OrderCreateSerializer,
    OrderListSerializer,
    OrderSerializer,
    PaymentCreateSerializer,
    ResultsSubmitSerializer,
)
from lims_core.orders.filters import OrderFilter
from lims_core.orders.models import Order
from lims_core.orders.selectors import WORKLISTS, get_order, list_orders
from lims_core.orders.services import DeliveryGateService, OrderBillingService

IDEMPOTENCY_HEADER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    type=str,
    description="Replays the first response for a repeated submit.",
)


def _order_id(pk) -> int:
    order_id = int_or_none(pk, "id")
    if order_id is None:
        raise NotFoundError("Order not found.")
    return order_id


class OrderViewSet(viewsets.GenericViewSet):
    """
    Thin API layer:
    - Idempotency-Key reservation on create/payments
    - serializer validation
    - writes go to OrderBillingService / ResultWorkflowService / DeliveryGateService,
      reads to orders.selectors
    """
    serializer_class = OrderSerializer
    queryset = Order.objects.none()

    @extend_schema(
        tags=["Orders"],
        responses={200: OrderListSerializer(many=True)},
        parameters=[
            OpenApiParameter("patient_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("doctor_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("outstanding", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        f = OrderFilter(request.query_params, queryset=list_orders())
        if not f.is_valid():
            raise ValidationError(f.errors)
        return paginate(request, f.qs, OrderListSerializer)

    @extend_schema(tags=["Orders"], responses={200: OrderSerializer})
    def retrieve(self, request, pk=None):
        return Response(OrderSerializer(get_order(order_id=_order_id(pk))).data)

    @extend_schema(
        tags=["Orders"],
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        parameters=[IDEMPOTENCY_HEADER],
    )
    def create(self, request):
        def write():
            ser = OrderCreateSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            data = ser.validated_data

            order = OrderBillingService.create_order(
                patient_id=data["patient_id"],
                doctor_id=data.get("doctor_id"),
                test_ids=data["test_ids"],
                discount=data["discount"],
                cash_paid=data["cash_paid"],
                payment_method=data["payment_method"],
                actor=current_user_identity(request.user),
            )
            return OrderSerializer(get_order(order_id=order.id)).data

        out = run_idempotent(request, write, status.HTTP_201_CREATED)
        return Response(out, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Orders"],
        request=PaymentCreateSerializer,
        responses={201: OrderSerializer},
        parameters=[IDEMPOTENCY_HEADER],
    )
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        def write():
            ser = PaymentCreateSerializer(data=request.data)
            ser.is_valid(raise_exception=True)

            order = OrderBillingService.apply_payment(
                order_id=_order_id(pk),
                amount=ser.validated_data["amount"],
                method=ser.validated_data["method"],
                reference=ser.validated_data.get("reference", ""),
                actor=current_user_identity(request.user),
            )
            return OrderSerializer(get_order(order_id=order.id)).data

        out = run_idempotent(request, write, status.HTTP_201_CREATED)
        return Response(out, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Orders"], request=ResultsSubmitSerializer, responses={200: LineItemSerializer(many=True)})
    @action(detail=True, methods=["post"], url_path="results")
    def results(self, request, pk=None):
        ser = ResultsSubmitSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        actor = current_user_identity(request.user)

        if "results" in data:
            saved = ResultWorkflowService.record_results(
                order_id=_order_id(pk),
                values={r["line_item_id"]: r["value"] for r in data["results"]},
                actor=actor,
            )
        else:
            saved = [
                ResultWorkflowService.record_result(
                    order_id=_order_id(pk),
                    line_item_id=data["line_item_id"],
                    raw_value=data["value"],
                    actor=actor,
                )
            ]
        return Response(LineItemSerializer(saved, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Orders"], request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        order = ResultWorkflowService.complete_order(
            order_id=_order_id(pk),
            actor=current_user_identity(request.user),
        )
        return Response(OrderSerializer(get_order(order_id=order.id)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Orders"], request=CancelSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = OrderBillingService.cancel_order(
            order_id=_order_id(pk),
            reason=ser.validated_data.get("reason", ""),
            actor=current_user_identity(request.user),
        )
        return Response(OrderSerializer(get_order(order_id=order.id)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Orders"], request=DeliverSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="deliver")
    def deliver(self, request, pk=None):
        """
        Deliver a COMPLETED order's report. With collect_payment_first and an
        outstanding balance but no payment_amount, the order comes back with
        report_delivered=false.
        """
        ser = DeliverSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        order = DeliveryGateService.deliver(
            order_id=_order_id(pk),
            collect_payment_first=data["collect_payment_first"],
            payment_amount=data.get("payment_amount"),
            payment_method=data["payment_method"],
            actor=current_user_identity(request.user),
        )
        return Response(OrderSerializer(get_order(order_id=order.id)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Orders"], responses={200: OrderListSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"worklists/(?P<worklist>[a-z]+)")
    def worklists(self, request, worklist=None):
        selector = WORKLISTS.get(worklist or "")
        if selector is None:
            raise NotFoundError(f"Unknown worklist '{worklist}'.")
        return paginate(request, selector(), OrderListSerializer)
