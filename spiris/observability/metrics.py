"""Request metrics for the Spiris client.

Tracks request counts, failures by status and timing.

Usage:
    from spiris.observability import RequestMetrics

    metrics = RequestMetrics()
    metrics.record(status=200, duration=0.12)
    metrics.record(status=0, duration=1.5, error="timeout")

    print(metrics.success_rate)  # 50.0
    print(metrics.to_summary())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class RequestMetrics:
    """Counters for requests made through one client."""

    started_at: datetime = field(default_factory=datetime.now)

    total_requests: int = 0
    successful: int = 0
    failed: int = 0
    total_duration: float = 0.0  # seconds

    # Failure breakdown: HTTP status (as string) or "network"
    errors_by_status: dict[str, int] = field(default_factory=dict)
    rate_limit_hits: int = 0

    @property
    def success_rate(self) -> float:
        """Success rate as percentage (0-100)."""
        if self.total_requests == 0:
            return 0.0
        return self.successful / self.total_requests * 100

    @property
    def average_duration(self) -> float:
        """Mean request duration in seconds."""
        if self.total_requests == 0:
            return 0.0
        return self.total_duration / self.total_requests

    def record(self, status: int, duration: float, error: str | None = None) -> None:
        """Record one completed request (status 0 means no response)."""
        self.total_requests += 1
        self.total_duration += duration

        if error is None and 200 <= status < 300:
            self.successful += 1
            return

        self.failed += 1
        key = str(status) if status else "network"
        self.errors_by_status[key] = self.errors_by_status.get(key, 0) + 1
        if status == 429:
            self.rate_limit_hits += 1

    def reset(self) -> None:
        self.started_at = datetime.now()
        self.total_requests = 0
        self.successful = 0
        self.failed = 0
        self.total_duration = 0.0
        self.errors_by_status = {}
        self.rate_limit_hits = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "started_at": self.started_at.isoformat(),
            "total_requests": self.total_requests,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": round(self.success_rate, 2),
            "average_duration_ms": round(self.average_duration * 1000, 1),
            "errors_by_status": dict(self.errors_by_status),
            "rate_limit_hits": self.rate_limit_hits,
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Request Summary",
            "=" * 40,
            f"Total: {self.total_requests} requests",
            f"Success: {self.successful} ({self.success_rate:.1f}%)",
            f"Failed: {self.failed}",
            f"Avg duration: {self.average_duration * 1000:.0f}ms",
        ]
        if self.errors_by_status:
            lines.append("Errors by status:")
            for status, count in sorted(self.errors_by_status.items()):
                lines.append(f"  {status}: {count}")
        return "\n".join(lines)
