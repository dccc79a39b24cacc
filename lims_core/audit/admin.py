from __future__ import annotations

from django.contrib import admin

from lims_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_code", "entity_type", "entity_id", "actor", "occurred_at")
    list_filter = ("event_code", "entity_type")
    search_fields = ("entity_id", "actor", "event_code")
    ordering = ("-occurred_at",)
    readonly_fields = ("event_code", "entity_type", "entity_id", "actor", "occurred_at", "metadata")

    def has_change_permission(self, request, obj=None):
        return False
