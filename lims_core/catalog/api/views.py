from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets

from lims_core.catalog.api.serializers import TestDefinitionSerializer
from lims_core.catalog.models import TestDefinition
from lims_core.catalog.selectors import list_tests
from lims_core.common.api.pagination import paginate


class TestDefinitionViewSet(viewsets.GenericViewSet):
    serializer_class = TestDefinitionSerializer
    queryset = TestDefinition.objects.none()

    @extend_schema(tags=["Catalog"], responses={200: TestDefinitionSerializer(many=True)})
    def list(self, request):
        return paginate(request, list_tests(), TestDefinitionSerializer)
