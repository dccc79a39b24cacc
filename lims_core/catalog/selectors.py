# lims_core/catalog/selectors.py
from __future__ import annotations

from typing import Iterable

from django.db.models import QuerySet

from lims_core.catalog.models import TestDefinition
from lims_core.common.api.exceptions import NotFoundError


def list_tests(*, active_only: bool = True) -> QuerySet[TestDefinition]:
    qs = TestDefinition.objects.all().order_by("test_name")
    if active_only:
        qs = qs.filter(is_active=True)
    return qs


def resolve_tests(test_ids: Iterable[int]) -> list[TestDefinition]:
    """
    Batch lookup in the caller's order. Any unknown or inactive id fails the
    whole lookup with NotFoundError naming the missing ids.
    """
    ids = list(test_ids)
    found = {t.id: t for t in TestDefinition.objects.filter(id__in=ids, is_active=True)}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFoundError(f"Test(s) not found: {', '.join(str(i) for i in missing)}")
    return [found[i] for i in ids]
