"""
Report service - ingestion and moderation of citizen reports.

DESIGN NOTE:
- Signals are extracted exactly once, here, and stored with the report
- There is no re-analysis path: moderation never touches `signals`
- Image inference failure never blocks ingestion (text-only fallback)
- Image bytes are not persisted; only their metadata is
"""

from ecocity.core.exceptions import ReportNotFoundError
from ecocity.core.settings import settings
from ecocity.models.report import (
    AdminReportList,
    AdminReportResponse,
    AISummary,
    Pagination,
    ReportCreate,
    ReportResponse,
    ReportStatus,
    UploadResponse,
    Visibility,
)
from ecocity.services.recommendation_generator import RecommendationGenerator, get_recommendation_generator
from ecocity.services.signal_extractor import SignalExtractor, get_signal_extractor
from ecocity.services.signal_store.base import SignalStore
from ecocity.services.signal_store.registry import get_signal_store
from ecocity.utils.security import generate_report_id, hash_ip_address, sanitize_filename, sha256_hex
from ecocity.utils.signal_rows import parse_timestamp
from ecocity.utils.time_windows import utc_now
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
import logging
import math

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ReportResponse)


def clamp_latitude(lat: Optional[float]) -> Optional[float]:
    return None if lat is None else max(-90.0, min(90.0, lat))


def clamp_longitude(lng: Optional[float]) -> Optional[float]:
    return None if lng is None else max(-180.0, min(180.0, lng))


class ReportService:
    """Ingestion flow plus moderator updates."""

    def __init__(
        self,
        store: Optional[SignalStore] = None,
        extractor: Optional[SignalExtractor] = None,
        generator: Optional[RecommendationGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store if store is not None else get_signal_store()
        self.extractor = extractor or get_signal_extractor()
        self.generator = generator or get_recommendation_generator()
        self.clock = clock or utc_now

    def ingest(
        self,
        report: ReportCreate,
        image_bytes: Optional[bytes] = None,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
        uploader_ip: Optional[str] = None,
    ) -> UploadResponse:
        """
        Create a report: extract signals, build recommendations, store once.

        Flow:
        1. Clamp coordinates, collect photo metadata
        2. Extract signals (at most one inference attempt)
        3. Generate per-report recommended actions
        4. Insert the report document (StoreError propagates)

        Returns:
            UploadResponse with the new id and the AI summary
        """
        report_id = generate_report_id()
        lat = clamp_latitude(report.lat)
        lng = clamp_longitude(report.lng)
        image_bytes = image_bytes or None

        extraction = self.extractor.extract(
            text=report.text,
            place_text=report.place_text,
            place_area=report.place_area,
            lat=lat,
            lng=lng,
            image_bytes=image_bytes,
        )
        signals = extraction.signals
        actions = self.generator.generate(signals.domain, signals.issue_types, report.place_text)

        document: Dict[str, Any] = {
            "id": report_id,
            "created_at": self.clock(),
            "observed_at": report.observed_at,
            "text": report.text,
            "place_text": report.place_text,
            "place_area": report.place_area or None,
            "lat": lat,
            "lng": lng,
            "status": ReportStatus.NEW.value,
            "visibility": Visibility.PUBLIC.value,
            "content_type": content_type if image_bytes else None,
            "size_bytes": len(image_bytes) if image_bytes else None,
            "sha256": sha256_hex(image_bytes) if image_bytes else None,
            "original_filename": sanitize_filename(filename) if image_bytes else None,
            "uploader_ip_hash": hash_ip_address(uploader_ip),
            "ai_caption": extraction.caption,
            "ai_category": extraction.category.value,
            "ai_severity": signals.severity.value,
            "ai_confidence": extraction.confidence,
            "ai_labels": list(extraction.labels),
            "signals": signals.model_dump(mode="json"),
            "recommendations": [action.model_dump(mode="json") for action in actions],
        }
        if extraction.inference_error:
            document["ai_error"] = extraction.inference_error

        self.store.insert_report(document)
        logger.info(
            f"✅ Report {report_id} ingested: domain={signals.domain.value} "
            f"issues={signals.issue_types} severity={signals.severity.value}"
        )

        return UploadResponse(
            id=report_id,
            viewUrl=f"/i/{report_id}",
            ai=AISummary(
                caption=extraction.caption,
                domain=signals.domain.value,
                issue_types=list(signals.issue_types),
                severity=signals.severity.value,
                confidence=extraction.confidence,
                recommended_actions=actions,
            ),
        )

    def get_report(self, report_id: str) -> ReportResponse:
        doc = self.store.get_report(report_id)
        if doc is None:
            raise ReportNotFoundError(report_id)
        return self.to_response(doc)

    def get_admin_report(self, report_id: str) -> AdminReportResponse:
        """Moderator detail view; blocked reports are included."""
        doc = self.store.get_report(report_id)
        if doc is None:
            raise ReportNotFoundError(report_id)
        return self.to_response(doc, model=AdminReportResponse)

    def list_reports(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        visibility: Optional[str] = None,
        status: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> AdminReportList:
        """
        Paginated moderator listing, newest first.

        page is clamped to >= 1 and page_size to [1, ADMIN_PAGE_SIZE_MAX]
        (missing or 0 means ADMIN_PAGE_SIZE_DEFAULT).
        """
        page = max(1, page or 1)
        page_size = page_size or settings.ADMIN_PAGE_SIZE_DEFAULT
        page_size = max(1, min(page_size, settings.ADMIN_PAGE_SIZE_MAX))

        documents, total = self.store.list_reports(
            offset=(page - 1) * page_size,
            limit=page_size,
            visibility=visibility or None,
            status=status or None,
            domain=domain or None,
        )
        return AdminReportList(
            reports=self.to_responses(documents, model=AdminReportResponse),
            pagination=Pagination(
                page=page,
                pageSize=page_size,
                total=total,
                totalPages=math.ceil(total / page_size),
            ),
        )

    @staticmethod
    def to_response(doc: Dict[str, Any], model: Type[R] = ReportResponse) -> R:
        """
        Convert a stored document to the API model.

        A corrupt `signals` map is dropped from the view and missing text
        fields read as empty rather than failing the request.

        Raises:
            ValueError: the document is unusable even after that repair
        """
        data = dict(doc)
        data["created_at"] = parse_timestamp(doc.get("created_at"))
        data["hasImage"] = bool(doc.get("size_bytes"))
        for field in ("text", "place_text"):
            if not isinstance(data.get(field), str):
                data[field] = ""
        try:
            return model(**data)
        except ValueError:
            logger.warning(f"Stored report {doc.get('id')!r} has malformed fields, repairing view")

        data["signals"] = None
        data["recommendations"] = []
        return model(**data)

    @classmethod
    def to_responses(cls, docs: List[Dict[str, Any]], model: Type[R] = ReportResponse) -> List[R]:
        """Convert many documents, skipping (and logging) the unusable ones."""
        responses = []
        for doc in docs:
            try:
                responses.append(cls.to_response(doc, model=model))
            except ValueError as e:
                logger.error(f"❌ Skipping unreadable report {doc.get('id')!r}: {e}")
        return responses

    def set_status(self, report_id: str, status: str) -> None:
        """
        Move a report through new -> in_review -> actioned (any order).

        Raises:
            ValueError: unknown status
            ReportNotFoundError: unknown id
        """
        status_value = ReportStatus(status).value
        if not self.store.update_report(report_id, {"status": status_value}):
            raise ReportNotFoundError(report_id)
        logger.info(f"Report {report_id} status -> {status_value}")

    def set_visibility(self, report_id: str, visibility: Visibility) -> None:
        visibility_value = Visibility(visibility).value
        if not self.store.update_report(report_id, {"visibility": visibility_value}):
            raise ReportNotFoundError(report_id)
        logger.info(f"Report {report_id} visibility -> {visibility_value}")

    def delete(self, report_id: str) -> None:
        if not self.store.delete_report(report_id):
            raise ReportNotFoundError(report_id)
        logger.info(f"Report {report_id} deleted")
