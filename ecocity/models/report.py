"""
Pydantic models for citizen reports.
These models handle validation for report submission and responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum

from ecocity.models.signals import RecommendationAction, SignalRecord


class ReportStatus(str, Enum):
    """Moderation workflow state of a report."""
    NEW = "new"
    IN_REVIEW = "in_review"
    ACTIONED = "actioned"


class Visibility(str, Enum):
    PUBLIC = "public"
    BLOCKED = "blocked"


class ImageCategory(str, Enum):
    """Coarse kind of upload, derived from the image labels."""
    REPORT = "report"
    PHOTO = "photo"
    SCREENSHOT = "screenshot"
    DOCUMENT = "document"


class ReportCreate(BaseModel):
    """
    Incoming report fields (multipart form on POST /api/upload).
    The optional photo travels separately as raw bytes.
    """
    text: str = Field(..., min_length=1, max_length=5000, description="What the citizen observed")
    place_text: str = Field(..., min_length=1, max_length=500, description="Free-text place description")
    observed_at: str = Field(..., min_length=1, description="When the citizen observed the issue")
    place_area: Optional[str] = Field(None, max_length=200, description="Named area / neighbourhood")
    lat: Optional[float] = Field(None, description="Latitude (clamped to [-90, 90])")
    lng: Optional[float] = Field(None, description="Longitude (clamped to [-180, 180])")

    class Config:
        json_schema_extra = {
            "example": {
                "text": "Bin overflowing next to the bus stop, urgent",
                "place_text": "Main St bus stop",
                "observed_at": "2024-05-01T08:30:00Z",
                "place_area": "Downtown",
                "lat": 12.9716,
                "lng": 77.5946,
            }
        }
        extra = "ignore"


class AISummary(BaseModel):
    """AI section of the upload response."""
    caption: str
    domain: str
    issue_types: List[str]
    severity: str
    confidence: float
    recommended_actions: List[RecommendationAction]


class UploadResponse(BaseModel):
    id: str
    viewUrl: str
    ai: AISummary


class ReportResponse(BaseModel):
    """
    A stored report as returned by the detail endpoint.
    Image bytes are never part of the response.
    """
    id: str
    text: str
    place_text: str
    place_area: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    created_at: Optional[datetime] = None
    observed_at: Optional[str] = None
    status: ReportStatus = ReportStatus.NEW
    visibility: Visibility = Visibility.PUBLIC
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    original_filename: Optional[str] = None
    ai_caption: Optional[str] = None
    ai_category: Optional[str] = None
    ai_severity: Optional[str] = None
    ai_confidence: Optional[float] = None
    ai_labels: List[str] = Field(default_factory=list)
    signals: Optional[SignalRecord] = None
    recommendations: List[RecommendationAction] = Field(default_factory=list)
    hasImage: bool = False


class StatusUpdate(BaseModel):
    status: str = Field(..., description="One of: new, in_review, actioned")


class AdminReportResponse(ReportResponse):
    """Moderator view: includes blocked reports and upload fingerprints."""
    sha256: Optional[str] = None
    uploader_ip_hash: Optional[str] = None
    ai_error: Optional[str] = None


class Pagination(BaseModel):
    page: int
    pageSize: int
    total: int
    totalPages: int


class AdminReportList(BaseModel):
    reports: List[AdminReportResponse]
    pagination: Pagination
