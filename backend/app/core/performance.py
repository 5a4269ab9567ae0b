"""
Operation timing and in-process metrics.
"""
import time
import inspect
import logging
import threading
from collections import defaultdict, deque
from functools import wraps
from typing import Any, Deque, Dict, Optional

logger = logging.getLogger(__name__)

# Samples kept per metric
MAX_SAMPLES = 1000

_metrics_lock = threading.Lock()
_metrics: Dict[str, Deque[Dict[str, Any]]] = defaultdict(lambda: deque(maxlen=MAX_SAMPLES))


def _percentile(sorted_values, fraction: float) -> float:
    idx = min(int(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[idx]


class PerformanceMonitor:
    """Record durations of named operations and report summary statistics."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        with _metrics_lock:
            _metrics[name].append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Statistics for one metric.

        Returns:
            Dict with count, min, max, mean, p50, p95, or None if nothing was recorded
        """
        with _metrics_lock:
            samples = _metrics.get(metric_name)
            if not samples:
                return None
            values = sorted(s['value'] for s in samples)

        return {
            'count': len(values),
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / len(values),
            'p50': _percentile(values, 0.5),
            'p95': _percentile(values, 0.95),
        }

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        with _metrics_lock:
            names = list(_metrics.keys())
        return {name: PerformanceMonitor.get_stats(name) for name in names}

    @staticmethod
    def clear_metrics():
        with _metrics_lock:
            _metrics.clear()


def _finish(metric_name: str, start_time: float, error: Optional[BaseException] = None):
    duration = time.time() - start_time
    if error is None:
        PerformanceMonitor.record_metric(metric_name, duration, {'status': 'success'})
        logger.debug(f"{metric_name} completed in {duration:.3f}s", extra={'metric': metric_name, 'duration': duration})
    else:
        PerformanceMonitor.record_metric(metric_name, duration, {'status': 'error', 'error': str(error)})
        logger.warning(f"{metric_name} failed after {duration:.3f}s: {error}", extra={'metric': metric_name, 'duration': duration})


def track_performance(metric_name: str):
    """
    Decorator recording the execution time of a sync or async function.

    Usage:
        @track_performance("analyze_dataset")
        def analyze(dataset):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _finish(metric_name, start_time, e)
                    raise
                _finish(metric_name, start_time)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _finish(metric_name, start_time, e)
                raise
            _finish(metric_name, start_time)
            return result
        return sync_wrapper

    return decorator
