# lims_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from lims_core.audit.api.views import AuditEventViewSet
from lims_core.catalog.api.views import TestDefinitionViewSet
from lims_core.commissions.api.views import CommissionViewSet
from lims_core.doctors.api.views import DoctorViewSet
from lims_core.finance.api.views import FinanceReportViewSet, LedgerEntryViewSet
from lims_core.iam.api.auth import LoginView, LogoutView, MeView, RefreshView
from lims_core.orders.api.views import OrderViewSet
from lims_core.patients.api.views import PatientViewSet
from lims_core.suppliers.api.views import SupplierLedgerViewSet, SupplierViewSet

router = DefaultRouter()

router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"doctors", DoctorViewSet, basename="doctors")
router.register(r"catalog/tests", TestDefinitionViewSet, basename="catalog-tests")
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"commissions", CommissionViewSet, basename="commissions")

# more specific prefixes first
router.register(r"suppliers/ledger", SupplierLedgerViewSet, basename="supplier-ledger")
router.register(r"suppliers", SupplierViewSet, basename="suppliers")
router.register(r"finance/entries", LedgerEntryViewSet, basename="finance-entries")
router.register(r"finance", FinanceReportViewSet, basename="finance")

router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    *router.urls,
]
