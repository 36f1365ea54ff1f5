"""Tests for report ingestion and moderation."""

from datetime import timedelta

import pytest

from ecocity.core.exceptions import ReportNotFoundError
from ecocity.models.report import ReportCreate, ReportStatus, Visibility
from ecocity.services.report_service import ReportService, clamp_latitude, clamp_longitude
from ecocity.services.signal_extractor import SignalExtractor


@pytest.fixture
def service(store, failing_provider, clock) -> ReportService:
    return ReportService(store=store, extractor=SignalExtractor(inference_provider=failing_provider), clock=clock)


@pytest.fixture
def bin_report() -> ReportCreate:
    return ReportCreate(
        text="Bin overflowing next to the bus stop, urgent",
        place_text="Main St bus stop",
        observed_at="2024-05-10T08:30:00Z",
        place_area="Downtown",
        lat=12.9716,
        lng=77.5946,
    )


class TestClamp:

    def test_latitude(self):
        assert clamp_latitude(95.0) == 90.0
        assert clamp_latitude(-95.0) == -90.0
        assert clamp_latitude(None) is None

    def test_longitude(self):
        assert clamp_longitude(200.0) == 180.0
        assert clamp_longitude(-12.5) == -12.5


class TestIngest:

    def test_stores_signals_once(self, service, store, bin_report, now):
        response = service.ingest(bin_report)

        assert response.viewUrl == f"/i/{response.id}"
        assert len(response.id) == 16
        assert response.ai.domain == "waste"
        assert response.ai.issue_types == ["overflowing_bin"]
        assert response.ai.severity == "moderate"
        assert response.ai.caption.startswith("Report: Bin overflowing")
        assert response.ai.recommended_actions[0].title == "Increase waste collection frequency"

        doc = store.get_report(response.id)
        assert doc["created_at"] == now
        assert doc["status"] == "new"
        assert doc["visibility"] == "public"
        assert doc["signals"]["area_key"] == "area:downtown"
        assert doc["signals"]["location_quality"] == "gps"
        assert doc["ai_severity"] == "moderate"
        assert doc["recommendations"][0]["detail"] == "Bin overflow reported at Main St bus stop"

    def test_photo_metadata_and_failed_inference(self, service, store, bin_report, failing_provider):
        response = service.ingest(
            bin_report,
            image_bytes=b"\xff\xd8\xff fake jpeg",
            content_type="image/jpeg",
            filename="my photo (1).jpg",
            uploader_ip="203.0.113.7",
        )

        doc = store.get_report(response.id)
        assert failing_provider.calls == 1
        assert doc["size_bytes"] == len(b"\xff\xd8\xff fake jpeg")
        assert doc["content_type"] == "image/jpeg"
        assert doc["original_filename"] == "my_photo__1_.jpg"
        assert len(doc["sha256"]) == 64
        assert doc["uploader_ip_hash"] != "203.0.113.7"
        assert len(doc["uploader_ip_hash"]) == 16
        assert doc["signals"]["evidence"]["has_photo"] is True
        assert "ai_error" in doc

    def test_successful_inference(self, store, fake_provider, clock):
        service = ReportService(store=store, extractor=SignalExtractor(inference_provider=fake_provider), clock=clock)
        report = ReportCreate(text="Look at this", place_text="Oak Ave", observed_at="today")

        response = service.ingest(report, image_bytes=b"img", content_type="image/png", filename="a.png")

        assert response.ai.caption == "An overflowing trash bin on a sidewalk"
        assert response.ai.confidence == 0.81
        assert store.get_report(response.id)["ai_labels"] == ["ashcan", "garbage truck"]

    def test_coordinates_are_clamped(self, service, store):
        report = ReportCreate(text="pothole", place_text="Ring Rd", observed_at="now", lat=123.0, lng=-500.0)

        response = service.ingest(report)

        doc = store.get_report(response.id)
        assert (doc["lat"], doc["lng"]) == (90.0, -180.0)
        assert doc["signals"]["area_key"] == "grid:90:-180"


class TestModeration:

    def test_get_report(self, service, bin_report):
        response = service.ingest(bin_report)

        report = service.get_report(response.id)

        assert report.id == response.id
        assert report.signals.domain.value == "waste"
        assert report.hasImage is False

    def test_missing_report(self, service):
        with pytest.raises(ReportNotFoundError):
            service.get_report("nope")

    def test_set_status(self, service, bin_report):
        response = service.ingest(bin_report)
        service.set_status(response.id, "actioned")
        assert service.get_report(response.id).status == ReportStatus.ACTIONED

    def test_invalid_status(self, service, bin_report):
        response = service.ingest(bin_report)
        with pytest.raises(ValueError):
            service.set_status(response.id, "closed")

    def test_status_of_missing_report(self, service):
        with pytest.raises(ReportNotFoundError):
            service.set_status("nope", "in_review")

    def test_block_does_not_touch_signals(self, service, store, bin_report):
        response = service.ingest(bin_report)
        before = store.get_report(response.id)["signals"]

        service.set_visibility(response.id, Visibility.BLOCKED)

        doc = store.get_report(response.id)
        assert doc["visibility"] == "blocked"
        assert doc["signals"] == before

    def test_delete(self, service, store, bin_report):
        response = service.ingest(bin_report)
        service.delete(response.id)
        assert store.get_report(response.id) is None
        with pytest.raises(ReportNotFoundError):
            service.delete(response.id)

    def test_corrupt_signals_are_omitted_from_detail(self, make_report):
        doc = make_report(report_id="bad", signals={"domain": "waste", "issue_types": []})

        report = ReportService.to_response(doc)

        assert report.id == "bad"
        assert report.signals is None

    def test_missing_text_reads_as_empty(self, make_report):
        doc = make_report(report_id="no-text", severity="moderate")
        del doc["text"]

        report = ReportService.to_response(doc)

        assert report.text == ""
        assert report.signals.severity == "moderate"

    def test_unusable_documents_are_skipped(self, make_report):
        good = make_report(report_id="good")
        bad = make_report(report_id="bad", status="weird")

        reports = ReportService.to_responses([bad, good])

        assert [r.id for r in reports] == ["good"]


class TestAdminListing:

    def test_pages_and_totals(self, service, seed, make_report, now):
        seed(*[make_report(report_id=f"r{i}", created_at=now - timedelta(minutes=i)) for i in range(5)])

        listing = service.list_reports(page=2, page_size=2)

        assert [r.id for r in listing.reports] == ["r2", "r3"]
        assert listing.pagination.model_dump() == {"page": 2, "pageSize": 2, "total": 5, "totalPages": 3}

    def test_page_size_is_clamped(self, service):
        assert service.list_reports(page_size=0).pagination.pageSize == 20
        assert service.list_reports(page_size=500).pagination.pageSize == 100
        assert service.list_reports(page=-3).pagination.page == 1
        assert service.list_reports().pagination.totalPages == 0

    def test_filters_include_blocked(self, service, seed, make_report):
        seed(
            make_report(report_id="hidden", visibility="blocked"),
            make_report(report_id="shown"),
        )

        listing = service.list_reports(visibility="blocked")

        assert [r.id for r in listing.reports] == ["hidden"]
        assert listing.reports[0].visibility == Visibility.BLOCKED

    def test_admin_detail_returns_blocked_report(self, service, seed, make_report):
        doc = make_report(report_id="hidden", visibility="blocked")
        doc["sha256"] = "abc123"
        seed(doc)

        report = service.get_admin_report("hidden")

        assert report.visibility == Visibility.BLOCKED
        assert report.sha256 == "abc123"
        with pytest.raises(ReportNotFoundError):
            service.get_admin_report("nope")
