"""
Logging configuration.

On Cloud Run (K_SERVICE is set) records go to Google Cloud Logging, where the
`json_fields` extra becomes the structured payload of each entry. Locally,
records are written to stdout with the same fields appended as key=value
pairs, so waybill numbers and order ids stay greppable.
"""

import json
import logging
import os
import sys
from typing import Any

# Libraries that log every statement or connection at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "google.cloud.sql.connector", "pg8000")

LOCAL_FORMAT = "%(asctime)s [%(levelname)s] %(service)s %(name)s: %(message)s"

_logging_configured = False


def format_fields(fields: dict[str, Any]) -> str:
    """Render json_fields as space-separated key=value pairs."""
    rendered = []
    for key, value in fields.items():
        if isinstance(value, (dict, list, tuple)):
            value = json.dumps(value, ensure_ascii=False, default=str)
        rendered.append(f"{key}={value}")
    return " ".join(rendered)


class LocalFormatter(logging.Formatter):
    """Formatter that tags records with the service and appends json_fields."""

    def __init__(self, service_name: str):
        super().__init__(LOCAL_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        record.service = self.service_name
        message = super().format(record)

        json_fields = getattr(record, "json_fields", None)
        if json_fields:
            message = f"{message} | {format_fields(json_fields)}"

        return message


def resolve_level(level: str | None = None) -> int:
    """
    Resolve a level name, falling back to LOG_LEVEL and then INFO.

    Unknown names resolve to INFO rather than failing startup.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(level_name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(service_name: str = "ordertrack", level: str | None = None):
    """
    Configure logging for the service. Later calls are no-ops.

    Args:
        service_name: Service label attached to every record
        level: Level name; defaults to the LOG_LEVEL environment variable
    """
    global _logging_configured

    if _logging_configured:
        return

    log_level = resolve_level(level)
    if os.getenv("K_SERVICE"):
        _setup_cloud_logging(service_name, log_level)
    else:
        _setup_local_logging(service_name, log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _logging_configured = True


def _setup_cloud_logging(service_name: str, log_level: int):
    try:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging(log_level=log_level, labels={"service": service_name})

        logging.info("Cloud Logging configured for service: %s", service_name)
    except Exception as e:
        _setup_local_logging(service_name, log_level)
        logging.warning("Failed to setup Cloud Logging, using local logging: %s", e)


def _setup_local_logging(service_name: str, log_level: int):
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, LocalFormatter):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LocalFormatter(service_name))

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)
