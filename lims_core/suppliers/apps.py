from __future__ import annotations

from django.apps import AppConfig


class SuppliersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lims_core.suppliers"
    label = "suppliers"
