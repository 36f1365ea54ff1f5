"""
Signal Extractor - turns one citizen report into a structured SignalRecord.

DESIGN PRINCIPLES (CRITICAL):
- Classification is deterministic keyword matching over static tables
- No learning, no online adaptation
- Image understanding is delegated to the inference provider
- Extraction NEVER fails ingestion: inference errors degrade to text-only

PIPELINE:
1. Build one lowercase corpus from text + caption + labels
2. Detect domain (highest keyword count, ties keep enumeration order)
3. Detect issue types for that domain (non-exclusive)
4. Detect severity (moderate keywords win over mild)
5. Confidence, location quality, evidence, area key
"""

from ecocity.core.exceptions import InferenceError
from ecocity.models.report import ImageCategory
from ecocity.models.signals import (
    GENERAL_REPORT,
    Domain,
    Evidence,
    LocationQuality,
    Severity,
    SignalRecord,
)
from ecocity.services.inference.base import MAX_LABELS, InferenceProvider
from ecocity.services.inference.registry import get_inference_provider
from ecocity.utils.area_key import resolve_area_key
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
FALLBACK_CAPTION_CHARS = 100


class ExtractionResult:
    """Signals plus the report-level AI fields stored next to them."""

    def __init__(
        self,
        signals: SignalRecord,
        caption: str,
        labels: List[str],
        confidence: float,
        category: ImageCategory,
        inference_error: Optional[str] = None,
    ):
        self.signals = signals
        self.caption = caption
        self.labels = labels
        self.confidence = confidence
        self.category = category
        self.inference_error = inference_error

    @property
    def severity(self) -> Severity:
        return self.signals.severity


class SignalExtractor:
    """
    Rule-based classifier for citizen reports.

    The keyword tables below are process-wide configuration. They are read
    only; dict order is significant (domains and issue types are scanned
    in declaration order).
    """

    DOMAIN_KEYWORDS: Dict[Domain, Tuple[str, ...]] = {
        Domain.WASTE: ("trash", "garbage", "bin", "dump", "litter", "waste", "rubbish", "debris", "refuse"),
        Domain.WATER: ("water", "leak", "pipe", "flood", "drain", "sewage", "puddle", "drip", "tap", "hydrant"),
        Domain.POWER: ("light", "streetlight", "lamp", "electric", "power", "wire", "pole", "bulb", "energy"),
        Domain.ROADS: ("pothole", "road", "pavement", "crack", "asphalt", "street", "sidewalk", "curb"),
        Domain.TRAFFIC: ("traffic", "signal", "congestion", "jam", "vehicle", "car", "accident"),
    }

    ISSUE_TYPES: Dict[Domain, Dict[str, Tuple[str, ...]]] = {
        Domain.WASTE: {
            "overflowing_bin": ("overflow", "full", "spill"),
            "illegal_dumping": ("dump", "illegal", "pile"),
            "missed_collection": ("missed", "uncollected", "schedule"),
        },
        Domain.WATER: {
            "leak": ("leak", "drip", "broken"),
            "water_wastage": ("waste", "running", "open"),
            "flooding": ("flood", "submerge", "water level"),
        },
        Domain.POWER: {
            "streetlight_outage": ("out", "dark", "not working", "broken"),
            "streetlight_on_daytime": ("daytime", "noon", "day", "morning", "afternoon", "sun"),
            "overuse_report": ("overuse", "excessive", "waste"),
        },
        Domain.ROADS: {
            "pothole": ("pothole", "hole", "crater"),
            "blocked_road": ("blocked", "obstruct", "barrier"),
        },
        Domain.TRAFFIC: {
            "congestion": ("congestion", "jam", "slow", "stuck"),
            "signal_fault": ("signal", "light", "malfunction"),
        },
    }

    MODERATE_KEYWORDS: Tuple[str, ...] = (
        "urgent", "severe", "dangerous", "hazard", "emergency", "critical", "major", "overflow", "flood",
    )
    MILD_KEYWORDS: Tuple[str, ...] = ("minor", "small", "slight", "little")

    def __init__(self, inference_provider: Optional[InferenceProvider] = None):
        self.inference_provider = inference_provider or get_inference_provider()

    # ------------------------------------------------------------------
    # Classification steps
    # ------------------------------------------------------------------

    @staticmethod
    def build_corpus(text: str, caption: Optional[str] = None, labels: Optional[List[str]] = None) -> str:
        return f"{text} {caption or ''} {' '.join(labels or [])}".lower()

    def detect_domain(self, corpus: str) -> Domain:
        best_domain = Domain.OTHER
        best_score = 0
        for domain, keywords in self.DOMAIN_KEYWORDS.items():
            score = sum(1 for kw in keywords if kw in corpus)
            # Strictly greater: ties keep the earlier domain
            if score > best_score:
                best_score = score
                best_domain = domain
        return best_domain

    def detect_issue_types(self, domain: Domain, corpus: str) -> List[str]:
        domain_issues = self.ISSUE_TYPES.get(domain)
        if not domain_issues:
            return [GENERAL_REPORT]

        issue_types = [
            issue_type
            for issue_type, keywords in domain_issues.items()
            if any(kw in corpus for kw in keywords)
        ]
        return issue_types or [GENERAL_REPORT]

    def detect_severity(self, corpus: str) -> Severity:
        if any(kw in corpus for kw in self.MODERATE_KEYWORDS):
            return Severity.MODERATE
        if any(kw in corpus for kw in self.MILD_KEYWORDS):
            return Severity.MILD
        return Severity.SAFE

    @staticmethod
    def detect_location_quality(
        place_text: Optional[str], lat: Optional[float], lng: Optional[float]
    ) -> LocationQuality:
        if lat is not None and lng is not None:
            return LocationQuality.GPS
        if place_text:
            return LocationQuality.TEXT
        return LocationQuality.UNKNOWN

    @staticmethod
    def detect_category(labels: List[str], has_photo: bool) -> ImageCategory:
        lowered = [label.lower() for label in labels]
        if any("screen" in label or "monitor" in label for label in lowered):
            return ImageCategory.SCREENSHOT
        if any("document" in label or "paper" in label for label in lowered):
            return ImageCategory.DOCUMENT
        if has_photo:
            return ImageCategory.PHOTO
        return ImageCategory.REPORT

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def build_signals(
        self,
        text: str,
        place_text: Optional[str] = None,
        caption: Optional[str] = None,
        labels: Optional[List[str]] = None,
        confidence: Optional[float] = None,
        place_area: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        has_photo: bool = False,
    ) -> SignalRecord:
        """
        Classify already-known text/caption/labels into a SignalRecord.

        Pure function of its inputs: identical inputs give identical records.
        """
        labels = list(labels or [])[:MAX_LABELS]
        corpus = self.build_corpus(text, caption, labels)

        domain = self.detect_domain(corpus)
        issue_types = self.detect_issue_types(domain, corpus)
        severity = self.detect_severity(corpus)

        return SignalRecord(
            domain=domain,
            issue_types=issue_types,
            severity=severity,
            confidence=DEFAULT_CONFIDENCE if confidence is None else confidence,
            location_quality=self.detect_location_quality(place_text, lat, lng),
            area_key=resolve_area_key(place_area, lat, lng),
            evidence=Evidence(
                has_photo=has_photo,
                image_labels=labels,
                caption=caption or None,
            ),
        )

    def extract(
        self,
        text: str,
        place_text: Optional[str] = None,
        place_area: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        image_bytes: Optional[bytes] = None,
    ) -> ExtractionResult:
        """
        Extract signals from a report, calling the inference provider for photos.

        At most one inference attempt. Any InferenceError (or unexpected
        provider exception) falls back to a text-only caption.
        """
        has_photo = bool(image_bytes)
        caption = f"Report: {text[:FALLBACK_CAPTION_CHARS]}"
        labels: List[str] = []
        confidence: Optional[float] = None
        inference_error = None

        if has_photo:
            try:
                result = self.inference_provider.analyze_image(image_bytes)
                caption = result.caption
                labels = result.label_names
                confidence = result.top_score
            except InferenceError as e:
                inference_error = str(e)
                logger.warning(f"⚠️ Image inference unavailable, using text only: {e}")
            except Exception as e:
                inference_error = f"Unexpected inference failure: {e}"
                logger.warning(f"⚠️ Image inference failed unexpectedly, using text only: {e}", exc_info=True)

        if confidence is not None and not 0.0 <= confidence <= 1.0:
            logger.warning(f"Discarding out-of-range inference score {confidence}")
            confidence = None

        signals = self.build_signals(
            text=text,
            place_text=place_text,
            caption=caption,
            labels=labels,
            confidence=confidence,
            place_area=place_area,
            lat=lat,
            lng=lng,
            has_photo=has_photo,
        )

        return ExtractionResult(
            signals=signals,
            caption=caption,
            labels=labels,
            confidence=signals.confidence,
            category=self.detect_category(labels, has_photo),
            inference_error=inference_error,
        )


# Global extractor instance (singleton pattern)
_extractor: Optional[SignalExtractor] = None


def get_signal_extractor() -> SignalExtractor:
    """Get or create the SignalExtractor singleton."""
    global _extractor
    if _extractor is None:
        _extractor = SignalExtractor()
    return _extractor
