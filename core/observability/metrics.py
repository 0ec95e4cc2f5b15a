"""
Metrics Collection for the Calendar Pipeline

Collects and exposes metrics for:
- Sync cycles (started, completed, failed)
- Webflow API requests (per endpoint, retries, errors)
- Record normalization (kept / dropped per record kind)
- Processing times (average, p95)

Metrics are in-memory only and reset with the process.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Any
import statistics


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class SyncMetrics:
    """Metrics for calendar sync cycles."""
    started: int = 0
    completed: int = 0
    failed: int = 0
    in_progress: int = 0

    # By site
    by_site: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"started": 0, "completed": 0, "failed": 0}))


@dataclass
class RequestMetrics:
    """Metrics for Webflow API requests."""
    total: int = 0
    failed: int = 0
    retries: int = 0

    # By endpoint, e.g. "GET collections/{id}/items" or "proxy GET"
    by_endpoint: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"total": 0, "failed": 0, "retries": 0}))


@dataclass
class RecordMetrics:
    """Metrics for record normalization."""
    kept: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    dropped: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Drop reasons by kind, e.g. {"school_holidays": {"end_before_start": 1}}
    drop_reasons: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: defaultdict(int)))


@dataclass
class TimingMetrics:
    """Processing time metrics."""
    # Raw timing samples (keep last N for percentile calculations)
    samples: List[float] = field(default_factory=list)
    max_samples: int = 1000

    # By stage
    by_stage: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def add_sample(self, duration_ms: float, stage: str = None):
        """Add a timing sample."""
        self.samples.append(duration_ms)
        if len(self.samples) > self.max_samples:
            self.samples = self.samples[-self.max_samples:]

        if stage:
            self.by_stage[stage].append(duration_ms)
            if len(self.by_stage[stage]) > self.max_samples:
                self.by_stage[stage] = self.by_stage[stage][-self.max_samples:]

    def get_average(self, stage: str = None) -> float:
        """Get average processing time."""
        samples = self.by_stage.get(stage, []) if stage else self.samples
        return statistics.mean(samples) if samples else 0.0

    def get_p95(self, stage: str = None) -> float:
        """Get 95th percentile processing time."""
        samples = self.by_stage.get(stage, []) if stage else self.samples
        if not samples:
            return 0.0
        sorted_samples = sorted(samples)
        idx = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(idx, len(sorted_samples) - 1)]


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector for the calendar pipeline.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_sync_started("site-123")
        metrics.record_records("public_holidays", kept=10, dropped=2)
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = Lock()

    def __init__(self):
        self.syncs = SyncMetrics()
        self.requests = RequestMetrics()
        self.records = RecordMetrics()
        self.timings = TimingMetrics()
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # =========================================================================
    # Sync Metrics
    # =========================================================================

    def record_sync_started(self, site_id: str):
        """Record a sync cycle start."""
        with self._lock:
            self.syncs.started += 1
            self.syncs.in_progress += 1
            self.syncs.by_site[site_id]["started"] += 1

    def record_sync_completed(self, site_id: str, duration_ms: float = None):
        """Record a sync cycle completion."""
        with self._lock:
            self.syncs.completed += 1
            self.syncs.in_progress = max(0, self.syncs.in_progress - 1)
            self.syncs.by_site[site_id]["completed"] += 1

            if duration_ms:
                self.timings.add_sample(duration_ms, "sync")

    def record_sync_failed(self, site_id: str):
        """Record a sync cycle failure."""
        with self._lock:
            self.syncs.failed += 1
            self.syncs.in_progress = max(0, self.syncs.in_progress - 1)
            self.syncs.by_site[site_id]["failed"] += 1

    # =========================================================================
    # Request Metrics
    # =========================================================================

    def record_request(self, endpoint: str, failed: bool = False):
        """Record a Webflow API request."""
        with self._lock:
            self.requests.total += 1
            self.requests.by_endpoint[endpoint]["total"] += 1
            if failed:
                self.requests.failed += 1
                self.requests.by_endpoint[endpoint]["failed"] += 1

    def record_request_retry(self, endpoint: str):
        """Record a Webflow API request retry."""
        with self._lock:
            self.requests.retries += 1
            self.requests.by_endpoint[endpoint]["retries"] += 1

    # =========================================================================
    # Record Metrics
    # =========================================================================

    def record_records(self, kind: str, kept: int, dropped: int = 0):
        """Record normalization outcome counts for a record kind."""
        with self._lock:
            self.records.kept[kind] += kept
            self.records.dropped[kind] += dropped

    def record_drop_reason(self, kind: str, reason: str):
        """Record why a single record was dropped."""
        with self._lock:
            self.records.drop_reasons[kind][reason] += 1

    # =========================================================================
    # Timing Metrics
    # =========================================================================

    def record_processing_time(self, stage: str, duration_ms: float):
        """Record a processing time sample."""
        with self._lock:
            self.timings.add_sample(duration_ms, stage)

    def get_timing_stats(self, stage: str = None) -> Dict[str, float]:
        """Get timing statistics for a stage."""
        with self._lock:
            return {
                "average_ms": self.timings.get_average(stage),
                "p95_ms": self.timings.get_p95(stage),
                "sample_count": len(self.timings.by_stage.get(stage, []) if stage else self.timings.samples),
            }

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "syncs": {
                    "started": self.syncs.started,
                    "completed": self.syncs.completed,
                    "failed": self.syncs.failed,
                    "in_progress": self.syncs.in_progress,
                    "by_site": {k: dict(v) for k, v in self.syncs.by_site.items()},
                },
                "requests": {
                    "total": self.requests.total,
                    "failed": self.requests.failed,
                    "retries": self.requests.retries,
                    "by_endpoint": {k: dict(v) for k, v in self.requests.by_endpoint.items()},
                },
                "records": {
                    "kept": dict(self.records.kept),
                    "dropped": dict(self.records.dropped),
                    "drop_reasons": {k: dict(v) for k, v in self.records.drop_reasons.items()},
                },
                "timings": {
                    "overall": {
                        "average_ms": self.timings.get_average(),
                        "p95_ms": self.timings.get_p95(),
                    },
                    "by_stage": {
                        stage: {
                            "average_ms": self.timings.get_average(stage),
                            "p95_ms": self.timings.get_p95(stage),
                        }
                        for stage in self.timings.by_stage.keys()
                    },
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()


def record_sync_started(site_id: str):
    """Record a sync cycle start."""
    get_metrics().record_sync_started(site_id)


def record_sync_completed(site_id: str, duration_ms: float = None):
    """Record a sync cycle completion."""
    get_metrics().record_sync_completed(site_id, duration_ms)


def record_sync_failed(site_id: str):
    """Record a sync cycle failure."""
    get_metrics().record_sync_failed(site_id)


def record_request(endpoint: str, failed: bool = False):
    """Record a Webflow API request."""
    get_metrics().record_request(endpoint, failed)


def record_request_retry(endpoint: str):
    """Record a Webflow API request retry."""
    get_metrics().record_request_retry(endpoint)


def record_records(kind: str, kept: int, dropped: int = 0):
    """Record normalization outcome counts."""
    get_metrics().record_records(kind, kept, dropped)


def record_drop_reason(kind: str, reason: str):
    """Record why a single record was dropped."""
    get_metrics().record_drop_reason(kind, reason)


def record_processing_time(stage: str, duration_ms: float):
    """Record a processing time sample."""
    get_metrics().record_processing_time(stage, duration_ms)
