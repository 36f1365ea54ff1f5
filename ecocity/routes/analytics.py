"""
Analytics endpoints - hotspots, recommendations, time series, dashboard.

DESIGN PRINCIPLES:
- Every response is recomputed from the store on request (no caching)
- Store failures return 500 with no partial results
- Unrecognized windows fall back to the endpoint's default window
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from typing import Callable, Dict, List, Optional, TypeVar

from ecocity.core.exceptions import StoreError
from ecocity.core.settings import settings
from ecocity.models.signals import (
    DomainSeriesPoint,
    Hotspot,
    InsightRecommendation,
    SeriesPoint,
    SeveritySeriesPoint,
)
from ecocity.routes.dependencies import (
    get_dashboard_service,
    get_hotspot_service,
    get_insight_service,
    get_timeseries_service,
)
from ecocity.services.dashboard_service import DashboardService
from ecocity.services.hotspot_service import HotspotService
from ecocity.services.insight_service import InsightService
from ecocity.services.report_service import ReportService
from ecocity.services.timeseries_service import SeriesMode, TimeSeriesService

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

T = TypeVar("T")


# Response models
class HotspotsResponse(BaseModel):
    window: str
    hotspots: List[Hotspot]


class RecommendationsResponse(BaseModel):
    window: str
    recommendations: List[InsightRecommendation]


class SeriesResponse(BaseModel):
    window: str
    bucket: str
    series: List[SeriesPoint]


class DomainSeriesResponse(BaseModel):
    window: str
    bucket: str
    series: List[DomainSeriesPoint]


class SeveritySeriesResponse(BaseModel):
    window: str
    bucket: str
    series: List[SeveritySeriesPoint]


class StatsResponse(BaseModel):
    total: int
    today: int
    flagged: int
    topDomain: Optional[str] = None
    byStatus: Dict[str, int] = Field(default_factory=dict)
    byVisibility: Dict[str, int] = Field(default_factory=dict)
    bySeverity: Dict[str, int] = Field(default_factory=dict)


def _run(what: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch {what}: {e}",
        )


@router.get("/hotspots", response_model=HotspotsResponse)
def get_hotspots(
    window: Optional[str] = Query(None, description="24h, 7d (default) or 30d"),
    domain: Optional[str] = Query(None, description="Only this domain"),
    service: HotspotService = Depends(get_hotspot_service),
):
    """Top (domain, issue type, area) buckets over the window."""
    return _run("hotspots", lambda: service.get_hotspots(window=window, domain=domain))


@router.get("/recommendations", response_model=RecommendationsResponse)
def get_recommendations(
    window: Optional[str] = Query(None, description="24h, 7d (default) or 30d"),
    service: InsightService = Depends(get_insight_service),
):
    """Prioritized municipal recommendations per (domain, area)."""
    return _run("recommendations", lambda: service.get_recommendations(window=window))


@router.get("/timeseries", response_model=SeriesResponse)
def get_timeseries(
    window: Optional[str] = Query(None, description="24h, 7d or 30d (default)"),
    domain: Optional[str] = Query(None),
    service: TimeSeriesService = Depends(get_timeseries_service),
):
    return _run("timeseries", lambda: service.get_series(window=window, domain=domain, mode=SeriesMode.TOTAL))


@router.get("/domain-timeseries", response_model=DomainSeriesResponse)
def get_domain_timeseries(
    window: Optional[str] = Query(None, description="24h, 7d or 30d (default)"),
    service: TimeSeriesService = Depends(get_timeseries_service),
):
    return _run("domain timeseries", lambda: service.get_series(window=window, mode=SeriesMode.BY_DOMAIN))


@router.get("/severity-timeseries", response_model=SeveritySeriesResponse)
def get_severity_timeseries(
    window: Optional[str] = Query(None, description="24h, 7d or 30d (default)"),
    service: TimeSeriesService = Depends(get_timeseries_service),
):
    return _run("severity timeseries", lambda: service.get_series(window=window, mode=SeriesMode.BY_SEVERITY))


@router.get("/stats", response_model=StatsResponse)
def get_stats(service: DashboardService = Depends(get_dashboard_service)):
    return _run("stats", service.get_stats)


@router.get("/domains")
def get_domains(service: DashboardService = Depends(get_dashboard_service)):
    return {"domains": _run("domains", service.get_domain_counts)}


@router.get("/categories")
def get_categories(service: DashboardService = Depends(get_dashboard_service)):
    return {"categories": _run("categories", service.get_category_counts)}


@router.get("/flagged")
def get_flagged(
    limit: Optional[int] = Query(
        None,
        description=f"Default {settings.FLAGGED_LIMIT_DEFAULT} (also used for 0), clamped to {settings.FLAGGED_LIMIT_MAX}",
    ),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Blocked or mild/moderate reports, newest first. Unreadable records are skipped."""
    documents = _run("flagged content", lambda: service.get_flagged(limit=limit))
    return {"flagged": ReportService.to_responses(documents)}
