"""Tests for the rule-based signal extractor."""

import pytest

from ecocity.models.report import ImageCategory
from ecocity.models.signals import Domain, LocationQuality, Severity
from ecocity.services.inference.base import InferenceResult
from ecocity.services.signal_extractor import SignalExtractor

from conftest import FakeInferenceProvider


@pytest.fixture
def extractor(failing_provider) -> SignalExtractor:
    return SignalExtractor(inference_provider=failing_provider)


class TestClassification:
    """Domain, issue type and severity detection."""

    def test_identical_input_gives_identical_record(self, extractor):
        kwargs = dict(
            text="Bin overflowing, urgent",
            place_text="Main St",
            caption="A full trash can",
            labels=["ashcan"],
            confidence=0.7,
        )
        assert extractor.build_signals(**kwargs) == extractor.build_signals(**kwargs)

    def test_moderate_keyword_beats_mild_keyword(self, extractor):
        signals = extractor.build_signals(text="minor leak but urgent")
        assert signals.severity == Severity.MODERATE

    def test_mild_keyword(self, extractor):
        signals = extractor.build_signals(text="a minor pothole")
        assert signals.domain == Domain.ROADS
        assert signals.issue_types == ["pothole"]
        assert signals.severity == Severity.MILD

    def test_no_severity_keyword_is_safe(self, extractor):
        assert extractor.build_signals(text="garbage near the corner").severity == Severity.SAFE

    def test_unmatched_domain_is_general_report(self, extractor):
        signals = extractor.build_signals(text="Strange noise from the park")
        assert signals.domain == Domain.OTHER
        assert signals.issue_types == ["general_report"]

    def test_unmatched_issue_type_within_domain(self, extractor):
        signals = extractor.build_signals(text="garbage near the corner")
        assert signals.domain == Domain.WASTE
        assert signals.issue_types == ["general_report"]

    def test_domain_tie_keeps_declaration_order(self, extractor):
        # one waste keyword, one water keyword
        assert extractor.build_signals(text="trash water").domain == Domain.WASTE

    def test_highest_keyword_count_wins(self, extractor):
        signals = extractor.build_signals(text="trash in the water, pipe leak, drain blocked")
        assert signals.domain == Domain.WATER

    def test_issue_types_are_non_exclusive(self, extractor):
        signals = extractor.build_signals(text="bin overflowing and someone dumped a pile of trash")
        assert signals.domain == Domain.WASTE
        assert signals.issue_types == ["overflowing_bin", "illegal_dumping"]

    def test_caption_and_labels_feed_the_corpus(self, extractor):
        signals = extractor.build_signals(
            text="Look at this",
            caption="An overflowing trash bin",
            labels=["ashcan"],
        )
        assert signals.domain == Domain.WASTE
        assert "overflowing_bin" in signals.issue_types
        assert signals.severity == Severity.MODERATE

    def test_labels_capped_at_five(self, extractor):
        signals = extractor.build_signals(text="trash", labels=["a", "b", "c", "d", "e", "f", "g"])
        assert signals.evidence.image_labels == ["a", "b", "c", "d", "e"]


class TestLocation:

    def test_gps_quality_and_grid_key(self, extractor):
        signals = extractor.build_signals(text="trash", place_text="Main St", lat=12.3456, lng=98.7654)
        assert signals.location_quality == LocationQuality.GPS
        assert signals.area_key == "grid:12.35:98.77"

    def test_text_quality(self, extractor):
        signals = extractor.build_signals(text="trash", place_text="Main St", place_area="Downtown Park")
        assert signals.location_quality == LocationQuality.TEXT
        assert signals.area_key == "area:downtown_park"

    def test_unknown_quality(self, extractor):
        signals = extractor.build_signals(text="trash")
        assert signals.location_quality == LocationQuality.UNKNOWN
        assert signals.area_key is None


class TestExtract:
    """Full extraction including the inference call."""

    def test_text_only_report_skips_inference(self, failing_provider):
        extractor = SignalExtractor(inference_provider=failing_provider)
        result = extractor.extract(text="Streetlight out on my road", place_text="Oak Ave")

        assert failing_provider.calls == 0
        assert result.caption == "Report: Streetlight out on my road"
        assert result.inference_error is None
        assert result.category == ImageCategory.REPORT
        assert result.signals.evidence.has_photo is False

    def test_inference_failure_falls_back_to_text(self, failing_provider):
        extractor = SignalExtractor(inference_provider=failing_provider)
        text = "Bin overflowing at the bus stop " * 10
        result = extractor.extract(text=text, place_text="Main St", image_bytes=b"\x89PNG")

        assert failing_provider.calls == 1
        assert result.caption == "Report: " + text[:100]
        assert result.labels == []
        assert result.confidence == 0.5
        assert result.signals.evidence.has_photo is True
        assert result.signals.domain == Domain.WASTE
        assert "timed out" in result.inference_error

    def test_unexpected_provider_exception_falls_back(self):
        provider = FakeInferenceProvider(error=RuntimeError("boom"))
        result = SignalExtractor(inference_provider=provider).extract(text="trash", image_bytes=b"img")

        assert result.caption == "Report: trash"
        assert result.inference_error is not None

    def test_successful_inference(self, fake_provider):
        extractor = SignalExtractor(inference_provider=fake_provider)
        result = extractor.extract(text="Look at this", place_text="Main St", image_bytes=b"img")

        assert result.caption == "An overflowing trash bin on a sidewalk"
        assert result.labels == ["ashcan", "garbage truck"]
        assert result.confidence == 0.81
        assert result.category == ImageCategory.PHOTO
        assert result.signals.domain == Domain.WASTE
        assert result.signals.issue_types == ["overflowing_bin"]
        assert result.signals.severity == Severity.MODERATE
        assert result.signals.evidence.image_labels == ["ashcan", "garbage truck"]

    def test_out_of_range_score_is_discarded(self):
        provider = FakeInferenceProvider(
            result=InferenceResult(caption="a road", labels=[("street sign", 3.5)], top_score=3.5)
        )
        result = SignalExtractor(inference_provider=provider).extract(text="pothole", image_bytes=b"img")
        assert result.confidence == 0.5

    def test_screen_label_is_screenshot(self):
        provider = FakeInferenceProvider(
            result=InferenceResult(caption="a screen", labels=[("monitor", 0.9)], top_score=0.9)
        )
        result = SignalExtractor(inference_provider=provider).extract(text="trash", image_bytes=b"img")
        assert result.category == ImageCategory.SCREENSHOT

    def test_empty_caption_from_successful_inference_is_kept(self):
        provider = FakeInferenceProvider(
            result=InferenceResult(caption="", labels=[("ashcan", 0.7)], top_score=0.7)
        )

        result = SignalExtractor(inference_provider=provider).extract(text="trash here", image_bytes=b"img")

        assert result.caption == ""
        assert result.inference_error is None
        assert result.signals.evidence.caption is None
        assert result.confidence == 0.7
