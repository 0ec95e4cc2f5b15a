"""
Observability Module for the Calendar Pipeline

Provides:
- Structured logging with correlation IDs
- Metrics collection (sync cycles, API requests, record drops, timings)
"""

from core.observability.metrics import (
    MetricsCollector,
    get_metrics,
    record_sync_started,
    record_sync_completed,
    record_sync_failed,
    record_request,
    record_request_retry,
    record_records,
    record_drop_reason,
    record_processing_time,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    configure_logging_from_settings,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "get_metrics",
    "record_sync_started",
    "record_sync_completed",
    "record_sync_failed",
    "record_request",
    "record_request_retry",
    "record_records",
    "record_drop_reason",
    "record_processing_time",
    # Logging
    "get_logger",
    "configure_logging",
    "configure_logging_from_settings",
    "CorrelationContext",
    "with_correlation",
]
