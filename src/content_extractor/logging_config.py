"""Structured JSON logging configuration.

Configures Python stdlib logging to emit JSON with GCP-compatible field names.
Strategy attempts are logged with ``extra`` fields (``strategy``, ``outcome``,
``error_kind``, ``duration_seconds``) which the formatter emits as top-level
JSON keys.

Usage:
    from content_extractor.extraction import get_extractor
    from content_extractor.logging_config import configure_logging
    configure_logging()
    get_extractor()
"""

import logging
import logging.config

LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
                "name": "logger",
            },
            "static_fields": {
                "service": "content-extractor",
            },
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        # One line per request / per decoded segment otherwise
        "httpx": {"level": "WARNING"},
        "faster_whisper": {"level": "WARNING"},
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def configure_logging(level: str | None = None) -> None:
    """Apply structured JSON logging configuration.

    Call once at process startup, before the first ``extract()`` call.
    ``level`` overrides the root level (e.g. ``Settings.log_level``).
    """
    config = dict(LOGGING_CONFIG)
    if level:
        config["root"] = {**LOGGING_CONFIG["root"], "level": level.upper()}
    logging.config.dictConfig(config)
