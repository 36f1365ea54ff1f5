"""
Pydantic models for extracted signals and query-time aggregates.

DESIGN PRINCIPLE:
- SignalRecord is computed once at ingestion and never changed afterwards
- Hotspots, insights and time series are projections rebuilt on every query
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from enum import Enum


class Domain(str, Enum):
    """Top-level issue category. Declaration order is the classifier's tie-break order."""
    WASTE = "waste"
    WATER = "water"
    POWER = "power"
    ROADS = "roads"
    TRAFFIC = "traffic"
    OTHER = "other"


class Severity(str, Enum):
    """Report severity, ordered safe < mild < moderate."""
    SAFE = "safe"
    MILD = "mild"
    MODERATE = "moderate"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)

    @property
    def score(self) -> float:
        """Numeric weight used when averaging severities."""
        return SEVERITY_SCORES[self]


SEVERITY_SCORES: Dict[Severity, float] = {
    Severity.SAFE: 0.3,
    Severity.MILD: 0.6,
    Severity.MODERATE: 0.9,
}


class LocationQuality(str, Enum):
    GPS = "gps"
    TEXT = "text"
    UNKNOWN = "unknown"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


GENERAL_REPORT = "general_report"


class Evidence(BaseModel):
    """What the signal was derived from."""
    has_photo: bool = False
    image_labels: List[str] = Field(default_factory=list, max_length=5)
    caption: Optional[str] = None

    class Config:
        frozen = True


class SignalRecord(BaseModel):
    """
    Structured signals extracted from one citizen report.

    Persisted alongside the report (embedded as the `signals` map).
    """
    domain: Domain
    issue_types: List[str] = Field(..., min_length=1)
    severity: Severity
    confidence: float = Field(..., ge=0.0, le=1.0)
    location_quality: LocationQuality
    area_key: Optional[str] = None
    evidence: Evidence = Field(default_factory=Evidence)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "domain": "waste",
                "issue_types": ["overflowing_bin"],
                "severity": "moderate",
                "confidence": 0.82,
                "location_quality": "gps",
                "area_key": "grid:12.97:77.59",
                "evidence": {
                    "has_photo": True,
                    "image_labels": ["ashcan", "garbage truck"],
                    "caption": "An overflowing trash bin on a sidewalk",
                },
            }
        }


class RecommendationAction(BaseModel):
    """A per-report suggested action."""
    title: str
    detail: str
    priority: Priority


class Hotspot(BaseModel):
    """A ranked (domain, issue type, area key) bucket over a time window."""
    domain: str
    issue_type: str
    area_key: str
    count: int = Field(..., ge=0)
    avg_severity: float = Field(..., ge=0.0, le=1.0)
    top_places: List[str] = Field(default_factory=list, max_length=3)
    sample_ids: List[str] = Field(default_factory=list, max_length=5)


class SupportingHotspot(BaseModel):
    """Evidence behind an insight; issue types are merged, so always "multiple"."""
    issue_type: str = "multiple"
    count: int = Field(..., ge=0)


class InsightRecommendation(BaseModel):
    """Municipal-level recommendation for one (domain, area key) group."""
    domain: str
    area_key: str
    priority: Priority
    title: str
    rationale: str
    supporting_hotspot: SupportingHotspot


class SeriesPoint(BaseModel):
    """Report count for one calendar day (UTC)."""
    t: str = Field(..., description="Date as YYYY-MM-DD")
    count: int


class DomainSeriesPoint(BaseModel):
    t: str
    waste: int = 0
    water: int = 0
    power: int = 0
    roads: int = 0
    traffic: int = 0
    other: int = 0


class SeveritySeriesPoint(BaseModel):
    t: str
    safe: int = 0
    mild: int = 0
    moderate: int = 0
