# lims_core/iam/identity.py
from __future__ import annotations

from django.conf import settings


def unknown_identity() -> str:
    return getattr(settings, "LIMS_UNKNOWN_IDENTITY", "UNKNOWN")


def current_user_identity(user) -> str:
    """
    Identity string stamped on results, payments and audit rows.

    Each window/session passes its own request.user here; engine services
    never look up a "current" user themselves.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return unknown_identity()
    username = getattr(user, "get_username", None)
    name = username() if callable(username) else getattr(user, "username", "")
    return name or unknown_identity()
