from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from lims_core.audit.api.serializers import AuditEventSerializer
from lims_core.audit.models import AuditEvent
from lims_core.audit.selectors import list_audit_events
from lims_core.common.api.pagination import paginate


class AuditEventViewSet(viewsets.GenericViewSet):
    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter("entity_type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("entity_id", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("event_code", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("actor", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = list_audit_events(
            entity_type=request.query_params.get("entity_type"),
            entity_id=request.query_params.get("entity_id"),
            event_code=request.query_params.get("event_code"),
            actor=request.query_params.get("actor"),
        )
        return paginate(request, qs, AuditEventSerializer)
