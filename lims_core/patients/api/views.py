from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from lims_core.common.api.pagination import paginate
from lims_core.common.api.params import int_or_none
from lims_core.iam.identity import current_user_identity
from lims_core.patients.api.serializers import PatientSerializer
from lims_core.patients.models import Patient
from lims_core.patients.selectors import get_patient, list_patients
from lims_core.patients.services import PatientService


class PatientViewSet(viewsets.GenericViewSet):
    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    @extend_schema(
        tags=["Patients"],
        responses={200: PatientSerializer(many=True)},
        parameters=[OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False)],
    )
    def list(self, request):
        return paginate(request, list_patients(q=request.query_params.get("q")), PatientSerializer)

    @extend_schema(tags=["Patients"], responses={200: PatientSerializer})
    def retrieve(self, request, pk=None):
        return Response(PatientSerializer(get_patient(patient_id=int_or_none(pk, "id"))).data)

    @extend_schema(tags=["Patients"], request=PatientSerializer, responses={201: PatientSerializer})
    def create(self, request):
        ser = PatientSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        patient = PatientService.create_patient(actor=current_user_identity(request.user), **ser.validated_data)
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)
