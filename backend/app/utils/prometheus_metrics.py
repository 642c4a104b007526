"""
Prometheus Metrics for the Job Applier API

This module defines and exports Prometheus metrics for monitoring
the application in production.

Metrics Categories:
- Request metrics: apply requests by outcome, latency
- Generation metrics: AI cover letters vs fallback text
- Automation metrics: browser runs, field fill outcomes, open sessions
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST
)
from functools import wraps
from time import time
from typing import Callable, Any
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST METRICS
# =============================================================================

apply_requests_total = Counter(
    'job_applier_apply_requests_total',
    'Total number of apply requests',
    ['status']  # success, fallback, client_error, server_error
)

apply_latency_seconds = Histogram(
    'job_applier_apply_latency_seconds',
    'Apply request duration in seconds',
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0]
)


# =============================================================================
# GENERATION METRICS
# =============================================================================

cover_letters_total = Counter(
    'job_applier_cover_letters_total',
    'Cover letters produced',
    ['outcome']  # generated, fallback
)


# =============================================================================
# AUTOMATION METRICS
# =============================================================================

automation_runs_total = Counter(
    'job_applier_automation_runs_total',
    'Browser automation runs',
    ['outcome', 'mode']  # outcome: completed, failed
)

automation_fields_total = Counter(
    'job_applier_automation_fields_total',
    'Form field fill attempts',
    ['field', 'status']
)

automation_sessions_in_progress = Gauge(
    'job_applier_automation_sessions_in_progress',
    'Browser sessions currently open'
)


# =============================================================================
# APPLICATION INFO
# =============================================================================

application_info = Info(
    'job_applier',
    'Job Applier API information'
)


# =============================================================================
# HELPERS
# =============================================================================

def track_apply_latency(func: Callable) -> Callable:
    """Time an async apply handler."""
    @wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        start = time()
        try:
            return await func(*args, **kwargs)
        finally:
            apply_latency_seconds.observe(time() - start)
    return wrapper


def record_apply_request(status: str):
    apply_requests_total.labels(status=status).inc()


def record_cover_letter(outcome: str):
    cover_letters_total.labels(outcome=outcome).inc()


def record_automation_run(outcome: str, mode: str):
    automation_runs_total.labels(outcome=outcome, mode=mode).inc()


def record_field_outcome(field: str, status: str):
    automation_fields_total.labels(field=field, status=status).inc()


def get_metrics() -> tuple[bytes, str]:
    """
    Get Prometheus metrics in text format.

    Returns:
        Tuple of (metrics_bytes, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
