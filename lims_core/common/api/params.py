# lims_core/common/api/params.py
from __future__ import annotations

from datetime import date

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError as DRFValidationError


def int_or_none(value: str | None, field_name: str) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(str(value))
    except (TypeError, ValueError):
        raise DRFValidationError({field_name: "Invalid id"})


def date_or_default(value: str | None, field_name: str, default: date) -> date:
    if not value:
        return default
    parsed = parse_date(str(value))
    if parsed is None:
        raise DRFValidationError({field_name: "Invalid date, expected YYYY-MM-DD"})
    return parsed


def date_range_params(request) -> tuple[date, date]:
    """
    ?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
    Defaults to the first of the current month .. today.
    """
    today = timezone.localdate()
    date_from = date_or_default(request.query_params.get("date_from"), "date_from", today.replace(day=1))
    date_to = date_or_default(request.query_params.get("date_to"), "date_to", today)
    if date_from > date_to:
        raise DRFValidationError({"date_from": "Must be on or before date_to."})
    return date_from, date_to
