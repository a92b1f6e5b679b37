"""Observability facades: logging and metrics."""

from .logging import (
    configure_logging,
    current_log_context,
    get_logger,
    log_context,
    log_exception,
)
from .metrics import (
    format_prometheus,
    get_metrics_summary,
    get_registry,
    increment_counter,
    observe_histogram,
    record_skipped_records,
    record_sync_pass,
)

__all__ = [
    # Logging
    "configure_logging",
    "current_log_context",
    "get_logger",
    "log_context",
    "log_exception",
    # Metrics
    "format_prometheus",
    "get_metrics_summary",
    "get_registry",
    "increment_counter",
    "observe_histogram",
    "record_skipped_records",
    "record_sync_pass",
]
