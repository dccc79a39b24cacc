# lims_core/patients/models.py
from django.db import models

from lims_core.common.models import TimeStampedModel


class Patient(TimeStampedModel):
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True)

    # clinic-local medical record number
    mrn = models.CharField(max_length=64, unique=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["full_name"]),
            models.Index(fields=["phone"]),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.mrn})"
