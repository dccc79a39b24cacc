# lims_core/doctors/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from lims_core.common.api.exceptions import NotFoundError
from lims_core.doctors.models import Doctor


def get_doctor(*, doctor_id: int) -> Doctor:
    try:
        return Doctor.objects.get(id=doctor_id)
    except Doctor.DoesNotExist:
        raise NotFoundError(f"Doctor {doctor_id} not found.")


def list_doctors(*, active_only: bool = True) -> QuerySet[Doctor]:
    qs = Doctor.objects.all().order_by("name")
    if active_only:
        qs = qs.filter(is_active=True)
    return qs
