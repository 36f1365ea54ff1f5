"""
FastAPI dependencies wiring services to the store and inference provider.

Tests override get_signal_store / get_inference_provider through
app.dependency_overrides.
"""

from fastapi import Depends

from ecocity.services.dashboard_service import DashboardService
from ecocity.services.hotspot_service import HotspotService
from ecocity.services.inference.base import InferenceProvider
from ecocity.services.inference.registry import get_inference_provider
from ecocity.services.insight_service import InsightService
from ecocity.services.report_service import ReportService
from ecocity.services.signal_extractor import SignalExtractor
from ecocity.services.signal_store.base import SignalStore
from ecocity.services.signal_store.registry import get_signal_store
from ecocity.services.timeseries_service import TimeSeriesService


def get_report_service(
    store: SignalStore = Depends(get_signal_store),
    provider: InferenceProvider = Depends(get_inference_provider),
) -> ReportService:
    return ReportService(store=store, extractor=SignalExtractor(inference_provider=provider))


def get_hotspot_service(store: SignalStore = Depends(get_signal_store)) -> HotspotService:
    return HotspotService(store=store)


def get_insight_service(store: SignalStore = Depends(get_signal_store)) -> InsightService:
    return InsightService(store=store)


def get_timeseries_service(store: SignalStore = Depends(get_signal_store)) -> TimeSeriesService:
    return TimeSeriesService(store=store)


def get_dashboard_service(store: SignalStore = Depends(get_signal_store)) -> DashboardService:
    return DashboardService(store=store)
