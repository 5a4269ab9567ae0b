"""
Shared fixtures.
"""
import os

# Keep the upload rate limit out of the way of the test suite
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

import pytest
from app.core import storage
from app.core.performance import PerformanceMonitor
from app.services.dataset import Dataset


@pytest.fixture
def upload_store(tmp_path, monkeypatch):
    """Point the upload store at a temporary directory."""
    store = storage.LocalDiskStore(tmp_path / "uploads")
    monkeypatch.setattr(storage, "_store_instance", store)
    yield store
    storage.reset_store()


@pytest.fixture
def clean_metrics():
    PerformanceMonitor.clear_metrics()
    yield
    PerformanceMonitor.clear_metrics()


@pytest.fixture
def people_dataset():
    return Dataset.from_records([
        {"name": "Alice", "age": "25", "city": "NY", "score": "85.5"},
        {"name": "Bob", "age": "30", "city": "NY", "score": "90"},
        {"name": "Carol", "age": "35", "city": "LA", "score": ""},
        {"name": "Dave", "age": "n/a", "city": "", "score": "88.5"},
    ])
