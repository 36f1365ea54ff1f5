"""Pytest fixtures for EcoCity Signals tests."""

import os

# Must be set before ecocity.core.settings is imported
os.environ["USE_MOCK_DB"] = "true"
os.environ["INFERENCE_ENABLED"] = "false"

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from ecocity.core.exceptions import InferenceError
from ecocity.main import app
from ecocity.services.inference.base import InferenceProvider, InferenceResult
from ecocity.services.inference.registry import get_inference_provider
from ecocity.services.signal_store.memory_store import InMemorySignalStore
from ecocity.services.signal_store.registry import get_signal_store


NOW = datetime(2024, 5, 10, 12, 0, 0, tzinfo=timezone.utc)


class FakeInferenceProvider(InferenceProvider):
    """Returns a canned result, or raises when given an error."""

    def __init__(self, result: Optional[InferenceResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls = 0

    def is_enabled(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, str]:
        return {"name": "fake", "version": "test"}

    def analyze_image(self, image_bytes: bytes) -> InferenceResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise InferenceError("No canned result")
        return self.result


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def store() -> InMemorySignalStore:
    return InMemorySignalStore()


@pytest.fixture
def trash_bin_result() -> InferenceResult:
    return InferenceResult(
        caption="An overflowing trash bin on a sidewalk",
        labels=[("ashcan", 0.81), ("garbage truck", 0.07)],
        top_score=0.81,
        model_name="fake",
    )


@pytest.fixture
def fake_provider(trash_bin_result) -> FakeInferenceProvider:
    return FakeInferenceProvider(result=trash_bin_result)


@pytest.fixture
def failing_provider() -> FakeInferenceProvider:
    return FakeInferenceProvider(error=InferenceError("Workers AI timed out"))


@pytest.fixture
def make_report():
    """Factory for stored report documents with an embedded signal record."""
    counter = {"n": 0}

    def _make(
        report_id: Optional[str] = None,
        domain: str = "waste",
        issue_types: Optional[List[str]] = None,
        severity: str = "safe",
        area_key: Optional[str] = "area:downtown",
        place_text: Optional[str] = "Main St",
        created_at: Optional[datetime] = None,
        status: str = "new",
        visibility: str = "public",
        signals: Any = None,
    ) -> Dict[str, Any]:
        counter["n"] += 1
        if signals is None:
            signals = {
                "domain": domain,
                "issue_types": issue_types if issue_types is not None else ["overflowing_bin"],
                "severity": severity,
                "confidence": 0.5,
                "location_quality": "text",
                "area_key": area_key,
                "evidence": {"has_photo": False, "image_labels": [], "caption": None},
            }
        return {
            "id": report_id or f"r{counter['n']:03d}",
            "created_at": created_at or NOW - timedelta(hours=1),
            "observed_at": "2024-05-10T10:00:00Z",
            "text": "Report text",
            "place_text": place_text,
            "status": status,
            "visibility": visibility,
            "ai_severity": severity,
            "signals": signals,
        }

    return _make


@pytest.fixture
def seed(store, make_report):
    """Insert documents built by make_report into the store."""

    def _seed(*docs: Dict[str, Any]) -> List[Dict[str, Any]]:
        for doc in docs:
            store.insert_report(doc)
        return list(docs)

    return _seed


@pytest.fixture
def client(store, failing_provider):
    """TestClient wired to the in-memory store and a failing inference provider."""
    app.dependency_overrides[get_signal_store] = lambda: store
    app.dependency_overrides[get_inference_provider] = lambda: failing_provider
    yield TestClient(app)
    app.dependency_overrides.clear()
