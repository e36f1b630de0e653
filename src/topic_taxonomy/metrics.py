"""In-process metrics for topic taxonomy resolution.

Counts how subscriptions were resolved and how the upstream sources
behaved, so a UI or service embedding the resolver can report its health.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ResolutionOutcome(Enum):
    """How a single subscription pattern was resolved."""

    MERGED = "merged"
    SYNTHETIC = "synthetic"
    FAILED = "failed"


@dataclass
class ResolutionMetrics:
    """Container for resolver metrics."""

    # Per-pattern resolution
    resolutions_merged: int = 0
    resolutions_synthetic: int = 0
    resolutions_failed: int = 0
    matched_template_counts: deque[int] = field(default_factory=lambda: deque(maxlen=1000))

    # Queue lookups
    queue_lookups: int = 0
    queue_lookup_failures: int = 0

    # Upstream fetch latency
    registry_fetch_times: deque[float] = field(default_factory=lambda: deque(maxlen=500))
    subscription_fetch_times: deque[float] = field(default_factory=lambda: deque(maxlen=500))

    started_at: datetime = field(default_factory=datetime.now)


def _average_ms(samples: deque[float]) -> float:
    return sum(samples) / len(samples) * 1000 if samples else 0


class MetricsCollector:
    """Thread-safe metrics collection for a TopicResolver."""

    def __init__(self, resolver_name: str):
        self.resolver_name = resolver_name
        self.metrics = ResolutionMetrics()
        self._active_timers: dict[str, tuple[str, float]] = {}
        self._timer_counter = 0
        self._lock = threading.Lock()

    def start_timer(self, operation: str) -> str:
        """Start timing an operation.

        Args:
            operation: 'registry_fetch' or 'subscription_fetch'

        Returns:
            Timer ID for ending the timer
        """
        with self._lock:
            self._timer_counter += 1
            timer_id = f"{operation}_{self._timer_counter}"
            self._active_timers[timer_id] = (operation, time.perf_counter())
        return timer_id

    def end_timer(self, timer_id: str) -> float | None:
        """End timing and record duration.

        Returns:
            Duration in seconds, or None if timer not found
        """
        with self._lock:
            timer = self._active_timers.pop(timer_id, None)
            if timer is None:
                return None

            operation, start_time = timer
            duration = time.perf_counter() - start_time

            if operation == "registry_fetch":
                self.metrics.registry_fetch_times.append(duration)
            elif operation == "subscription_fetch":
                self.metrics.subscription_fetch_times.append(duration)

            return duration

    def record_resolution(self, outcome: ResolutionOutcome, matched_templates: int = 0):
        """Record how one subscription pattern was resolved."""
        with self._lock:
            if outcome is ResolutionOutcome.MERGED:
                self.metrics.resolutions_merged += 1
            elif outcome is ResolutionOutcome.SYNTHETIC:
                self.metrics.resolutions_synthetic += 1
            else:
                self.metrics.resolutions_failed += 1
            self.metrics.matched_template_counts.append(matched_templates)

    def record_queue_lookup(self, success: bool = True):
        with self._lock:
            self.metrics.queue_lookups += 1
            if not success:
                self.metrics.queue_lookup_failures += 1

    def get_metrics_summary(self) -> dict[str, Any]:
        """Get metrics summary.

        Returns:
            Dictionary containing collected counters and computed statistics
        """
        with self._lock:
            now = datetime.now()
            m = self.metrics
            total_resolutions = m.resolutions_merged + m.resolutions_synthetic + m.resolutions_failed
            ambiguous = sum(1 for count in m.matched_template_counts if count > 1)

            return {
                "resolver_name": self.resolver_name,
                "timestamp": now.isoformat(),
                "uptime_seconds": (now - m.started_at).total_seconds(),
                "resolutions": {
                    "total": total_resolutions,
                    "merged": m.resolutions_merged,
                    "synthetic": m.resolutions_synthetic,
                    "failed": m.resolutions_failed,
                    "ambiguous": ambiguous,
                    "failure_rate": m.resolutions_failed / total_resolutions if total_resolutions > 0 else 0,
                },
                "queue_lookups": {
                    "total": m.queue_lookups,
                    "failed": m.queue_lookup_failures,
                },
                "fetch_latency_ms": {
                    "registry_avg": _average_ms(m.registry_fetch_times),
                    "subscriptions_avg": _average_ms(m.subscription_fetch_times),
                },
                "active_timers": len(self._active_timers),
            }
