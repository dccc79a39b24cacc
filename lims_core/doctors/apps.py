from __future__ import annotations

from django.apps import AppConfig


class DoctorsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lims_core.doctors"
    label = "doctors"
