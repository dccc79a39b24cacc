from __future__ import annotations

from django.contrib import admin

from lims_core.doctors.models import Doctor


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "clinic_name", "commission_percentage", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "clinic_name", "phone")
    ordering = ("name",)
