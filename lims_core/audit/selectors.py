# lims_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from lims_core.audit.models import AuditEvent


def list_audit_events(
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    event_code: str | None = None,
    actor: str | None = None,
) -> QuerySet[AuditEvent]:
    qs = AuditEvent.objects.all()

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=str(entity_id))
    if event_code:
        qs = qs.filter(event_code=event_code)
    if actor:
        qs = qs.filter(actor=actor)

    return qs.order_by("-occurred_at", "-id")
