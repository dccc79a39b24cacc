# lims_core/common/events.py
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("order.created")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based to avoid cross-app imports.
    """
    for handler in list(_registry.get(event_name, [])):
        handler(payload)


def publish_fire_and_forget(event_name: str, payload: Dict[str, Any]) -> int:
    """
    Like publish(), but a failing subscriber is logged and skipped.
    Returns the number of handlers that failed.
    """
    failures = 0
    for handler in list(_registry.get(event_name, [])):
        try:
            handler(payload)
        except Exception:
            failures += 1
            logger.warning(
                "event subscriber failed",
                exc_info=True,
                extra={"ctx": {"event": event_name, "handler": getattr(handler, "__name__", repr(handler))}},
            )
    return failures
