# lims_core/audit/services.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.db import transaction

from lims_core.audit.models import AuditEvent


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: str
    actor: str
    metadata: Dict[str, Any]


class AuditService:
    """
    Central audit writer. Persists into AuditEvent (immutable).
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id,
        actor: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        metadata = dict(metadata or {})

        AuditEvent.objects.create(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor=actor,
            metadata=metadata,
        )

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor=actor,
            metadata=metadata,
        )
