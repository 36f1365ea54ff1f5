"""
Normalization of persisted report documents into aggregation rows.

A single corrupt record must never take down an aggregation query:
- invalid / missing signals  -> domain "other", issue_types ["general_report"]
- invalid / missing severity -> "safe"
- unparseable created_at     -> None (record skipped only by date bucketing)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ecocity.models.signals import GENERAL_REPORT, Domain, Severity

logger = logging.getLogger(__name__)

UNKNOWN_AREA = "unknown"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse various timestamp formats to timezone-aware datetime (UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    # Firestore Timestamp interface
    if hasattr(value, "timestamp"):
        try:
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            return None
    return None


class SignalRow:
    """The per-record projection every aggregator folds over."""

    __slots__ = ("id", "domain", "issue_types", "area_key", "place_text", "severity", "created_at")

    def __init__(
        self,
        id: str,
        domain: Domain,
        issue_types: List[str],
        area_key: Optional[str],
        place_text: Optional[str],
        severity: Severity,
        created_at: Optional[datetime],
    ):
        self.id = id
        self.domain = domain
        self.issue_types = issue_types
        self.area_key = area_key
        self.place_text = place_text
        self.severity = severity
        self.created_at = created_at

    @property
    def area_key_or_unknown(self) -> str:
        return self.area_key or UNKNOWN_AREA

    def __repr__(self) -> str:
        return (
            f"SignalRow(id={self.id!r}, domain={self.domain.value!r}, "
            f"issue_types={self.issue_types!r}, area_key={self.area_key!r})"
        )


def _parse_severity(*candidates: Any) -> Severity:
    for candidate in candidates:
        try:
            return Severity(candidate)
        except ValueError:
            continue
    return Severity.SAFE


def _valid_issue_types(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, str) and item for item in value)
    )


def parse_signal_row(doc: Dict[str, Any]) -> SignalRow:
    """Project a stored report document into a SignalRow, tolerating corruption."""
    signals = doc.get("signals")
    if not isinstance(signals, dict):
        signals = {}

    domain = None
    issue_types = signals.get("issue_types")
    try:
        domain = Domain(signals.get("domain"))
    except ValueError:
        pass

    if domain is None or not _valid_issue_types(issue_types):
        logger.debug(f"Malformed signals on report {doc.get('id')!r}, treating as general report")
        domain = Domain.OTHER
        issue_types = [GENERAL_REPORT]

    area_key = signals.get("area_key")
    if not isinstance(area_key, str) or not area_key:
        area_key = None

    place_text = doc.get("place_text")
    if not isinstance(place_text, str):
        place_text = None

    return SignalRow(
        id=str(doc.get("id", "")),
        domain=domain,
        issue_types=list(issue_types),
        area_key=area_key,
        place_text=place_text,
        severity=_parse_severity(signals.get("severity"), doc.get("ai_severity")),
        created_at=parse_timestamp(doc.get("created_at")),
    )


def parse_signal_rows(docs: List[Dict[str, Any]]) -> List[SignalRow]:
    return [parse_signal_row(doc) for doc in docs]
