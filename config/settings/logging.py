from pathlib import Path
import sys


def build_logging_config(log_dir: Path, log_level: str = "INFO", *, quiet: bool = False):
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "lims_core.logging_utils.JsonFormatter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
            "file": {
                # Several desktop windows / workers may write the same file.
                "class": "concurrent_log_handler.ConcurrentTimedRotatingFileHandler",
                "filename": log_dir / "lims.log",
                "when": "midnight",
                "interval": 1,
                "backupCount": 30,
                "formatter": "json",
                "encoding": "utf-8",
            },
        },
        "root": {
            "handlers": ["console", "file"],
            "level": log_level,
        },
        "loggers": {
            "django": {
                "handlers": ["console", "file"],
                "level": log_level,
                "propagate": False,
            },
            "django.request": {
                "handlers": ["console", "file"],
                "level": "ERROR",
                "propagate": False,
            },
            "lims_core": {
                "handlers": ["console", "file"],
                "level": log_level,
                "propagate": False,
            },
            "lims_core.request": {
                "handlers": ["console", "file"],
                "level": log_level,
                "propagate": False,
            },
        },
    }

    # Avoid noisy console/file logging in tests.
    if quiet or "test" in sys.argv or "pytest" in sys.modules:
        config["handlers"]["console"] = {"class": "logging.NullHandler"}
        config["handlers"]["file"] = {"class": "logging.NullHandler"}

    return config
