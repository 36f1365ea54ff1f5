"""
Report endpoints - citizen report submission and retrieval.
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from pydantic import ValidationError
import logging

from ecocity.core.exceptions import ReportNotFoundError, StoreError
from ecocity.models.report import ReportCreate, ReportResponse, UploadResponse, Visibility
from ecocity.routes.dependencies import get_report_service
from ecocity.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])


def _parse_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


@router.post("/upload", status_code=status.HTTP_201_CREATED, response_model=UploadResponse)
def submit_report(
    request: Request,
    text: str = Form(...),
    place_text: str = Form(...),
    observed_at: str = Form(...),
    place_area: Optional[str] = Form(None),
    lat: Optional[str] = Form(None),
    lng: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    service: ReportService = Depends(get_report_service),
):
    """
    Submit a new citizen report (multipart form, optional photo).

    This endpoint:
    1. Extracts structured signals (domain, issue types, severity, area key)
    2. Builds per-report recommended actions
    3. Stores the report with its signals

    Photo analysis is best-effort: if it fails the report is classified
    from its text alone.
    """
    image_bytes = file.file.read() if file is not None else None
    try:
        report = ReportCreate(
            text=text,
            place_text=place_text,
            observed_at=observed_at,
            place_area=place_area or None,
            lat=_parse_coordinate(lat),
            lng=_parse_coordinate(lng),
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors(include_url=False))
    uploader_ip = request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For")

    try:
        logger.info(f"📝 POST /api/upload - place={report.place_text!r} photo={bool(image_bytes)}")
        return service.ingest(
            report,
            image_bytes=image_bytes,
            content_type=file.content_type if file is not None else None,
            filename=file.filename if file is not None else None,
            uploader_ip=uploader_ip,
        )
    except StoreError as e:
        logger.error(f"❌ POST /api/upload - storing report failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {e}",
        )


@router.get("/reports/{report_id}", response_model=ReportResponse)
def get_report(report_id: str, service: ReportService = Depends(get_report_service)):
    """Public report detail. Blocked reports are hidden."""
    try:
        report = service.get_report(report_id)
    except ReportNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch report: {e}",
        )

    if report.visibility == Visibility.BLOCKED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Report is blocked")
    return report
