# lims_core/catalog/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from lims_core.common.models import TimeStampedModel


class TestDefinition(TimeStampedModel):
    """
    Test catalog / price list.
    Orders never point at these rows for pricing; they copy name, unit,
    range and price into their own line items at creation time.
    """
    __test__ = False  # not a pytest test class

    test_name = models.CharField(max_length=255)
    short_code = models.SlugField(max_length=32, unique=True)
    department = models.CharField(max_length=64, blank=True)

    unit = models.CharField(max_length=32, blank=True)
    min_range = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)
    max_range = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)

    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_test_definition"
        indexes = [
            models.Index(fields=["short_code"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.test_name} ({self.short_code})"
