"""
API performance metrics tracking.

Keeps a bounded window of request samples in memory and summarizes
latency and error rates per route. Routes are keyed by their template
("/graphs/{graph_id}") so that lookups for different graphs aggregate
together.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class RequestMetric:
    """Single request sample."""
    route: str
    method: str
    status_code: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)


def _percentile(sorted_values: List[float], fraction: float) -> float:
    if not sorted_values:
        return 0.0
    idx = min(int(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[idx]


class APIMetricsCollector:
    """Collects and aggregates API request metrics."""

    def __init__(self, max_metrics: int = 10000):
        """
        Args:
            max_metrics: Maximum number of samples kept in memory
        """
        self.max_metrics = max_metrics
        self.metrics: Deque[RequestMetric] = deque(maxlen=max_metrics)

    def record_request(
        self,
        route: str,
        method: str,
        status_code: int,
        latency_ms: float,
    ) -> None:
        self.metrics.append(
            RequestMetric(
                route=route,
                method=method,
                status_code=status_code,
                latency_ms=latency_ms,
            )
        )

    def get_summary(self, window_seconds: Optional[float] = None) -> Dict[str, Any]:
        """
        Summarize recorded requests.

        Args:
            window_seconds: Only include samples newer than this many seconds

        Returns:
            Dict with total request count and per-route statistics
        """
        samples = list(self.metrics)
        if window_seconds:
            cutoff = time.time() - window_seconds
            samples = [m for m in samples if m.timestamp >= cutoff]

        grouped: Dict[str, List[RequestMetric]] = {}
        for metric in samples:
            grouped.setdefault(f"{metric.method} {metric.route}", []).append(metric)

        routes: Dict[str, Dict[str, Any]] = {}
        for key, group in grouped.items():
            latencies = sorted(m.latency_ms for m in group)
            status_codes: Dict[int, int] = {}
            for m in group:
                status_codes[m.status_code] = status_codes.get(m.status_code, 0) + 1
            errors = sum(count for code, count in status_codes.items() if code >= 400)

            routes[key] = {
                "count": len(group),
                "avg_latency_ms": sum(latencies) / len(latencies),
                "p50_latency_ms": _percentile(latencies, 0.5),
                "p95_latency_ms": _percentile(latencies, 0.95),
                "error_rate": errors / len(group),
                "status_codes": status_codes,
            }

        return {
            "total_requests": len(samples),
            "window_seconds": window_seconds,
            "routes": routes,
        }

    def clear(self) -> None:
        self.metrics.clear()


# Global metrics collector instance
_metrics_collector = APIMetricsCollector()


def get_metrics_collector() -> APIMetricsCollector:
    """Get the global metrics collector instance."""
    return _metrics_collector


def record_api_request(
    route: str,
    method: str,
    status_code: int,
    latency_ms: float,
) -> None:
    """Record an API request metric."""
    _metrics_collector.record_request(route, method, status_code, latency_ms)


def get_api_metrics_summary(window_seconds: Optional[float] = None) -> Dict[str, Any]:
    """Get API metrics summary."""
    return _metrics_collector.get_summary(window_seconds)
