# lims_core/common/idempotency.py
from __future__ import annotations

import threading
from collections import OrderedDict

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from lims_core.common.api.exceptions import ConflictError
from lims_core.common.models import IdempotencyRecord

_LOCK = threading.Lock()
_STORE: "OrderedDict[tuple, object]" = OrderedDict()  # in-memory store (single process, tests/dev)
_PENDING = object()

# status_code of a reserved key whose response is not stored yet
PENDING_STATUS = 0


def _use_db() -> bool:
    """
    Enable durable records with:
        COMMON_IDEMPOTENCY_USE_DB = True
    """
    return bool(getattr(settings, "COMMON_IDEMPOTENCY_USE_DB", False))


def _memory_limit() -> int:
    return int(getattr(settings, "COMMON_IDEMPOTENCY_MEMORY_MAX", 1024))


def get_key(request):
    # In DRF test client: "HTTP_IDEMPOTENCY_KEY" becomes request.META["HTTP_IDEMPOTENCY_KEY"]
    return request.META.get("HTTP_IDEMPOTENCY_KEY")


def _norm(user_id, method, path, key):
    return (str(user_id), method.upper(), path, str(key))


def _lookup(user_id, method, path, key) -> dict:
    return {
        "user_id": int(user_id),
        "method": method.upper(),
        "path": path,
        "idempotency_key": str(key),
    }


def _in_flight() -> ConflictError:
    return ConflictError("A request with this Idempotency-Key is still in progress.")


def _remember(k, value) -> None:
    # caller holds _LOCK
    _STORE[k] = value
    _STORE.move_to_end(k)
    while len(_STORE) > _memory_limit():
        _STORE.popitem(last=False)


def reserve(user_id, method, path, key):
    """
    Claim the key before the write runs.

    Returns the stored response when the key already completed, or None once
    the key is claimed for this request. Raises ConflictError while another
    request holding the same key has not finished.

    DB mode must run inside the same transaction.atomic() as the write: the
    pending row and the write commit or roll back together, and the unique
    constraint makes a concurrent insert of the same key wait for (then fail
    against) the first one.
    """
    if not key:
        return None

    if not _use_db():
        k = _norm(user_id, method, path, key)
        with _LOCK:
            existing = _STORE.get(k)
            if existing is _PENDING:
                raise _in_flight()
            if existing is not None:
                return existing
            _remember(k, _PENDING)
        return None

    lookup = _lookup(user_id, method, path, key)
    try:
        with transaction.atomic():
            IdempotencyRecord.objects.create(**lookup, status_code=PENDING_STATUS, response_data={})
    except IntegrityError:
        rec = IdempotencyRecord.objects.filter(**lookup).first()
        if rec is None or rec.status_code == PENDING_STATUS:
            raise _in_flight()
        return rec.response_data
    return None


def release(user_id, method, path, key) -> None:
    """
    Drop a reservation whose write failed so the client can retry with the
    same key. DB reservations go away with the rolled back transaction.
    """
    if not key or _use_db():
        return
    k = _norm(user_id, method, path, key)
    with _LOCK:
        if _STORE.get(k) is _PENDING:
            del _STORE[k]


def load_response(user_id, method, path, key):
    if not key:
        return None

    if not _use_db():
        with _LOCK:
            value = _STORE.get(_norm(user_id, method, path, key))
        return None if value is _PENDING else value

    rec = (
        IdempotencyRecord.objects.filter(**_lookup(user_id, method, path, key))
        .exclude(status_code=PENDING_STATUS)
        .first()
    )
    return None if rec is None else rec.response_data


def save_response(user_id, method, path, key, response_data, status_code: int = 200):
    if not key:
        return

    if not _use_db():
        with _LOCK:
            _remember(_norm(user_id, method, path, key), response_data)
        return

    lookup = _lookup(user_id, method, path, key)
    updated = IdempotencyRecord.objects.filter(**lookup).update(
        status_code=int(status_code),
        response_data=response_data,
        updated_at=timezone.now(),
    )
    if not updated:
        IdempotencyRecord.objects.create(**lookup, status_code=int(status_code), response_data=response_data)


def run_idempotent(request, write, status_code: int = 200):
    """
    Run `write()` (returns response data) at most once per Idempotency-Key.

    Returns the response data, replayed from the first request when the key
    was seen before. Without a key the write simply runs.
    """
    key = get_key(request)
    if not key:
        return write()

    args = (request.user.id, request.method, request.path, key)
    with transaction.atomic():
        cached = reserve(*args)
        if cached is not None:
            return cached
        try:
            out = write()
        except Exception:
            release(*args)
            raise
        save_response(*args, out, status_code)
    return out


def clear_memory_store() -> None:
    with _LOCK:
        _STORE.clear()
