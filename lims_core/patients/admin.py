from __future__ import annotations

from django.contrib import admin

from lims_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("id", "mrn", "full_name", "phone", "gender", "created_at")
    search_fields = ("mrn", "full_name", "phone")
    ordering = ("-created_at",)
