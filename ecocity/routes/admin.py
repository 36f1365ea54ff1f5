"""
Admin endpoints - moderation of stored reports.

SCOPE OF ADMIN:
✅ List and inspect every report, blocked ones included
✅ Change report status (new / in_review / actioned)
✅ Block and unblock reports from public view
✅ Delete reports

❌ NOT edit report content
❌ NOT re-run signal extraction (signals are fixed at ingestion)
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
import logging

from ecocity.core.exceptions import ReportNotFoundError, StoreError
from ecocity.models.report import AdminReportList, AdminReportResponse, StatusUpdate, Visibility
from ecocity.routes.dependencies import get_report_service
from ecocity.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def _not_found(report_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Report {report_id} not found")


def _store_failed(action: str, e: StoreError) -> HTTPException:
    logger.error(f"❌ Admin {action} failed: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {e}",
    )


@router.get("/reports", response_model=AdminReportList)
def list_reports(
    page: int = Query(1, description="1-based page number"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="Default 20, max 100"),
    visibility: Optional[str] = Query(None, description="public or blocked"),
    status_filter: Optional[str] = Query(None, alias="status", description="new, in_review or actioned"),
    domain: Optional[str] = Query(None),
    service: ReportService = Depends(get_report_service),
):
    """
    Moderator listing of all reports (blocked included), newest first.

    Returns the page plus pagination {page, pageSize, total, totalPages}.
    """
    try:
        return service.list_reports(
            page=page,
            page_size=page_size,
            visibility=visibility,
            status=status_filter,
            domain=domain,
        )
    except StoreError as e:
        raise _store_failed("list reports", e)


@router.get("/reports/{report_id}", response_model=AdminReportResponse)
def get_report(report_id: str, service: ReportService = Depends(get_report_service)):
    """Moderator detail view. Unlike the public view, blocked reports are returned."""
    try:
        return service.get_admin_report(report_id)
    except ReportNotFoundError:
        raise _not_found(report_id)
    except StoreError as e:
        raise _store_failed("fetch report", e)


@router.post("/reports/{report_id}/status")
def update_status(report_id: str, request: StatusUpdate, service: ReportService = Depends(get_report_service)):
    """
    Change a report's workflow status.

    **Valid statuses:** new, in_review, actioned (any transition allowed)
    """
    try:
        service.set_status(report_id, request.status)
    except ReportNotFoundError:
        raise _not_found(report_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status {request.status!r}. Must be one of: new, in_review, actioned",
        )
    except StoreError as e:
        raise _store_failed("update status", e)
    return {"success": True, "id": report_id, "status": request.status}


@router.post("/reports/{report_id}/block")
def block_report(report_id: str, service: ReportService = Depends(get_report_service)):
    """Hide a report from public detail views."""
    try:
        service.set_visibility(report_id, Visibility.BLOCKED)
    except ReportNotFoundError:
        raise _not_found(report_id)
    except StoreError as e:
        raise _store_failed("block report", e)
    return {"success": True, "id": report_id, "visibility": Visibility.BLOCKED.value}


@router.post("/reports/{report_id}/unblock")
def unblock_report(report_id: str, service: ReportService = Depends(get_report_service)):
    try:
        service.set_visibility(report_id, Visibility.PUBLIC)
    except ReportNotFoundError:
        raise _not_found(report_id)
    except StoreError as e:
        raise _store_failed("unblock report", e)
    return {"success": True, "id": report_id, "visibility": Visibility.PUBLIC.value}


@router.delete("/reports/{report_id}")
def delete_report(report_id: str, service: ReportService = Depends(get_report_service)):
    try:
        service.delete(report_id)
    except ReportNotFoundError:
        raise _not_found(report_id)
    except StoreError as e:
        raise _store_failed("delete report", e)
    return {"success": True, "id": report_id}
