import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict


class JsonFormatter(logging.Formatter):
    """One JSON object per line; dict messages are merged into the payload."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            data: Dict[str, Any] = dict(record.msg)
        else:
            data = {"message": record.getMessage()}

        data.setdefault("level", record.levelname)
        data.setdefault("logger", record.name)

        if not data.get("time_local"):
            now = datetime.now(timezone.utc).astimezone()
            data["time_local"] = now.strftime("%Y-%m-%d %H:%M:%S")

        # Engine loggers pass structured context through `extra={"ctx": {...}}`.
        ctx = getattr(record, "ctx", None)
        if isinstance(ctx, dict):
            for key, value in ctx.items():
                data.setdefault(key, value)

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=_json_default)


def _json_default(value: Any):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
