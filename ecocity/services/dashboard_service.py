"""
Dashboard Service - moderation dashboard counters.

Read-only. Uses one unbounded scan of the store per call.
"""

from ecocity.core.settings import settings
from ecocity.models.report import ReportStatus, Visibility
from ecocity.models.signals import Domain, Severity
from ecocity.services.aggregation import WindowedAggregator
from ecocity.utils.signal_rows import parse_signal_row, parse_timestamp
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

FLAGGED_SEVERITIES = {Severity.MILD, Severity.MODERATE}
UNKNOWN_CATEGORY = "unknown"

_MIN_TIME = datetime.min.replace(tzinfo=timezone.utc)


class DashboardService(WindowedAggregator):

    def get_stats(self) -> Dict[str, Any]:
        """
        Overall counters.

        Returns:
            total, today, flagged, topDomain, byStatus, byVisibility, bySeverity
        """
        documents = self._load_documents(cutoff=None)
        today = self.clock().astimezone(timezone.utc).date()

        by_status: Counter = Counter()
        by_visibility: Counter = Counter()
        by_severity: Counter = Counter()
        by_domain: Counter = Counter()
        today_count = 0

        for doc in documents:
            row = parse_signal_row(doc)
            by_status[doc.get("status") or ReportStatus.NEW.value] += 1
            by_visibility[doc.get("visibility") or Visibility.PUBLIC.value] += 1
            by_severity[row.severity.value] += 1
            by_domain[row.domain] += 1
            if row.created_at is not None and row.created_at.date() == today:
                today_count += 1

        return {
            "total": len(documents),
            "today": today_count,
            "flagged": by_visibility.get(Visibility.BLOCKED.value, 0),
            "topDomain": self._top_domain(by_domain),
            "byStatus": dict(by_status),
            "byVisibility": dict(by_visibility),
            "bySeverity": dict(by_severity),
        }

    @staticmethod
    def _top_domain(by_domain: Counter) -> Optional[str]:
        top = None
        top_count = 0
        for domain in Domain:
            if by_domain[domain] > top_count:
                top, top_count = domain.value, by_domain[domain]
        return top

    def get_domain_counts(self) -> List[Dict[str, Any]]:
        """Count per domain, descending (ties in enumeration order)."""
        rows = self._load_rows(cutoff=None)
        counts = Counter(row.domain for row in rows)
        ordered = sorted((d for d in Domain if counts[d]), key=lambda d: counts[d], reverse=True)
        return [{"domain": domain.value, "count": counts[domain]} for domain in ordered]

    def get_category_counts(self) -> List[Dict[str, Any]]:
        """Count per stored image category, descending (ties first-seen)."""
        counts: Counter = Counter()
        for doc in self._load_documents(cutoff=None):
            category = doc.get("ai_category")
            counts[category if isinstance(category, str) and category else UNKNOWN_CATEGORY] += 1
        ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [{"category": category, "count": count} for category, count in ordered]

    def get_flagged(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Reports needing moderator attention, newest first.

        Flagged = blocked, or severity mild/moderate.
        """
        limit = limit or settings.FLAGGED_LIMIT_DEFAULT
        limit = max(1, min(limit, settings.FLAGGED_LIMIT_MAX))

        flagged = []
        for doc in self._load_documents(cutoff=None):
            row = parse_signal_row(doc)
            if doc.get("visibility") == Visibility.BLOCKED.value or row.severity in FLAGGED_SEVERITIES:
                flagged.append(doc)

        flagged.sort(key=lambda d: parse_timestamp(d.get("created_at")) or _MIN_TIME, reverse=True)
        return flagged[:limit]
