from __future__ import annotations

from django.contrib import admin

from lims_core.catalog.models import TestDefinition


@admin.register(TestDefinition)
class TestDefinitionAdmin(admin.ModelAdmin):
    list_display = ("id", "short_code", "test_name", "unit", "min_range", "max_range", "price", "is_active")
    list_filter = ("is_active", "department")
    search_fields = ("short_code", "test_name")
    ordering = ("test_name",)
