"""Tests for spiris/observability/metrics.py."""

import pytest

from spiris.observability.metrics import RequestMetrics


@pytest.fixture
def metrics() -> RequestMetrics:
    m = RequestMetrics()
    m.record(status=200, duration=0.1)
    m.record(status=200, duration=0.3)
    m.record(status=503, duration=0.2)
    m.record(status=0, duration=1.4, error="timeout")
    return m


class TestRequestMetrics:
    def test_empty(self):
        m = RequestMetrics()
        assert m.success_rate == 0.0
        assert m.average_duration == 0.0

    def test_success_rate(self, metrics):
        assert metrics.success_rate == pytest.approx(50.0)

    def test_average_duration(self, metrics):
        assert metrics.average_duration == pytest.approx(0.5)

    def test_to_dict(self, metrics):
        stats = metrics.to_dict()
        assert stats["success_rate"] == 50.0
        assert stats["average_duration_ms"] == 500.0
        assert stats["errors_by_status"] == {"503": 1, "network": 1}

    def test_error_with_2xx_counts_as_failure(self):
        m = RequestMetrics()
        m.record(status=200, duration=0.1, error="bad body")
        assert m.failed == 1
        assert m.errors_by_status == {"200": 1}

    def test_summary(self, metrics):
        summary = metrics.to_summary()

        assert "Total: 4 requests" in summary
        assert "Success: 2 (50.0%)" in summary
        assert "Failed: 2" in summary
        assert "Avg duration: 500ms" in summary
        assert "  503: 1" in summary
        assert "  network: 1" in summary

    def test_summary_without_errors(self):
        m = RequestMetrics()
        m.record(status=200, duration=0.05)
        assert "Errors by status" not in m.to_summary()
