# lims_core/patients/services.py
from __future__ import annotations

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from lims_core.audit.services import AuditService
from lims_core.patients.models import Patient


class PatientService:
    @staticmethod
    @transaction.atomic
    def create_patient(
        *,
        actor: str,
        full_name: str,
        mrn: str,
        phone: str = "",
        email: str = "",
        gender: str = "",
        date_of_birth=None,
    ) -> Patient:
        if not (full_name or "").strip():
            raise ValidationError({"full_name": "Patient name is required."})

        try:
            with transaction.atomic():
                patient = Patient.objects.create(
                    full_name=full_name.strip(),
                    mrn=mrn,
                    phone=phone or "",
                    email=email or "",
                    gender=gender or "",
                    date_of_birth=date_of_birth,
                )
        except IntegrityError:
            # MRN uniqueness is enforced by constraint; surface readable error.
            raise ValidationError({"mrn": "MRN already exists."})

        AuditService.log(
            event_code="patient.created",
            entity_type="Patient",
            entity_id=patient.id,
            actor=actor,
            metadata={"mrn": mrn},
        )
        return patient
