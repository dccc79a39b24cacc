# lims_core/catalog/services.py
from __future__ import annotations

from decimal import Decimal

from rest_framework.exceptions import ValidationError

from lims_core.catalog.models import TestDefinition
from lims_core.common.money import CENT, to_decimal


class TestDefinitionService:
    __test__ = False

    @staticmethod
    def upsert(
        *,
        short_code: str,
        test_name: str,
        price,
        unit: str = "",
        min_range=None,
        max_range=None,
        department: str = "",
        is_active: bool = True,
    ) -> TestDefinition:
        price = to_decimal(price, "price").quantize(CENT)
        if price < Decimal("0.00"):
            raise ValidationError({"price": "Must be >= 0"})

        min_range = None if min_range is None else to_decimal(min_range, "min_range")
        max_range = None if max_range is None else to_decimal(max_range, "max_range")
        if min_range is not None and max_range is not None and min_range > max_range:
            raise ValidationError({"min_range": "Must be <= max_range"})

        obj, _ = TestDefinition.objects.update_or_create(
            short_code=short_code,
            defaults={
                "test_name": test_name,
                "price": price,
                "unit": unit or "",
                "min_range": min_range,
                "max_range": max_range,
                "department": department or "",
                "is_active": is_active,
            },
        )
        return obj
