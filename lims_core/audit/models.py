# lims_core/audit/models.py
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class AuditEvent(models.Model):
    """
    Immutable audit record.
    Every billing/result/delivery write leaves one row here, in the same
    transaction as the write itself.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "order.completed"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Order"
    entity_id = models.CharField(max_length=64, db_index=True)

    # identity string of whoever performed the action ("UNKNOWN" if none)
    actor = models.CharField(max_length=150, db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["event_code", "occurred_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}#{self.entity_id}"
