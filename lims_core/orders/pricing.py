# lims_core/orders/pricing.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Iterator

from rest_framework.exceptions import ValidationError

from lims_core.catalog.selectors import resolve_tests


@dataclass(frozen=True)
class PricedTest:
    test_id: int
    name: str
    unit: str
    min_range: Decimal | None
    max_range: Decimal | None
    price: Decimal


@dataclass(frozen=True)
class PricingSnapshot:
    """
    Immutable (name, unit, range, price) copies of the requested tests,
    taken once at order creation.
    """
    items: tuple[PricedTest, ...]

    @classmethod
    def resolve(cls, test_ids: Iterable[int]) -> "PricingSnapshot":
        # a set of tests: drop repeats, keep the caller's order
        try:
            ids = list(dict.fromkeys(int(i) for i in (test_ids or [])))
        except (TypeError, ValueError):
            raise ValidationError({"test_ids": "Invalid test id."})
        if not ids:
            raise ValidationError({"test_ids": "Select at least one test."})

        return cls(
            items=tuple(
                PricedTest(
                    test_id=t.id,
                    name=t.test_name,
                    unit=t.unit or "",
                    min_range=t.min_range,
                    max_range=t.max_range,
                    price=(t.price or Decimal("0.00")).quantize(Decimal("0.01")),
                )
                for t in resolve_tests(ids)
            )
        )

    @property
    def total(self) -> Decimal:
        return sum((i.price for i in self.items), Decimal("0.00")).quantize(Decimal("0.01"))

    @property
    def test_ids(self) -> list[int]:
        return [i.test_id for i in self.items]

    def __iter__(self) -> Iterator[PricedTest]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
