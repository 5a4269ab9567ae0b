"""
Tests for performance monitoring.
"""
import asyncio
import pytest
from app.core.performance import PerformanceMonitor, track_performance, MAX_SAMPLES


def test_performance_monitor_record(clean_metrics):
    PerformanceMonitor.record_metric("parse", 1.5, {"rows": 10})
    PerformanceMonitor.record_metric("parse", 2.0)
    PerformanceMonitor.record_metric("parse", 0.5)

    stats = PerformanceMonitor.get_stats("parse")

    assert stats["count"] == 3
    assert stats["min"] == 0.5
    assert stats["max"] == 2.0
    assert stats["mean"] == pytest.approx(1.333, rel=0.01)
    assert stats["p50"] == 1.5


def test_performance_monitor_keeps_recent_samples(clean_metrics):
    for i in range(MAX_SAMPLES + 50):
        PerformanceMonitor.record_metric("busy", float(i))

    stats = PerformanceMonitor.get_stats("busy")
    assert stats["count"] == MAX_SAMPLES
    assert stats["min"] == 50.0


def test_performance_decorator_sync(clean_metrics):
    @track_performance("double")
    def double(x: int) -> int:
        return x * 2

    assert double(5) == 10
    assert PerformanceMonitor.get_stats("double")["count"] == 1


def test_performance_decorator_records_failures(clean_metrics):
    @track_performance("explode")
    def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        explode()

    assert PerformanceMonitor.get_stats("explode")["count"] == 1


@pytest.mark.asyncio
async def test_performance_decorator_async(clean_metrics):
    @track_performance("async_double")
    async def async_double(x: int) -> int:
        await asyncio.sleep(0.01)
        return x * 2

    assert await async_double(5) == 10

    stats = PerformanceMonitor.get_stats("async_double")
    assert stats["count"] == 1
    assert stats["mean"] > 0


def test_performance_monitor_clear():
    PerformanceMonitor.record_metric("temp", 1.0)
    assert PerformanceMonitor.get_stats("temp") is not None

    PerformanceMonitor.clear_metrics()
    assert PerformanceMonitor.get_stats("temp") is None
    assert PerformanceMonitor.get_all_metrics() == {}
