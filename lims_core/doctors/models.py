# lims_core/doctors/models.py
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from lims_core.common.models import TimeStampedModel


class Doctor(TimeStampedModel):
    """
    Referring doctor. commission_percentage is applied to the order total
    when an order referred by this doctor is created.
    """
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    clinic_name = models.CharField(max_length=255, blank=True)

    commission_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "doctors_doctor"
        indexes = [models.Index(fields=["name"])]

    def __str__(self) -> str:
        return self.name
