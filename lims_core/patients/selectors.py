# lims_core/patients/selectors.py
from __future__ import annotations

from django.db.models import Q, QuerySet

from lims_core.common.api.exceptions import NotFoundError
from lims_core.patients.models import Patient


def get_patient(*, patient_id: int) -> Patient:
    try:
        return Patient.objects.get(id=patient_id)
    except Patient.DoesNotExist:
        raise NotFoundError(f"Patient {patient_id} not found.")


def list_patients(*, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all().order_by("-created_at")
    if q:
        qs = qs.filter(Q(full_name__icontains=q) | Q(mrn__icontains=q) | Q(phone__icontains=q))
    return qs
