from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from lims_core.common.api.pagination import paginate
from lims_core.doctors.api.serializers import DoctorSerializer
from lims_core.doctors.models import Doctor
from lims_core.doctors.selectors import list_doctors


class DoctorViewSet(viewsets.GenericViewSet):
    """
    Referring doctors. Directory maintenance is thin CRUD; the rate is only
    read by the commission ledger at order creation.
    """
    serializer_class = DoctorSerializer
    queryset = Doctor.objects.none()

    @extend_schema(tags=["Doctors"], responses={200: DoctorSerializer(many=True)})
    def list(self, request):
        active_only = request.query_params.get("include_inactive") not in ("1", "true")
        return paginate(request, list_doctors(active_only=active_only), DoctorSerializer)

    @extend_schema(tags=["Doctors"], request=DoctorSerializer, responses={201: DoctorSerializer})
    def create(self, request):
        ser = DoctorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        doctor = ser.save()
        return Response(DoctorSerializer(doctor).data, status=status.HTTP_201_CREATED)
