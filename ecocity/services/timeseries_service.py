"""
Time Series Service - daily report counts (UTC calendar days).

Three variants:
- total:       one count per day, optional domain filter
- by-domain:   per day, a count for every domain (zeros filled)
- by-severity: per day, a count for every severity (zeros filled)

Only days with at least one report appear; gaps are not zero-filled.
"""

from ecocity.models.signals import Domain, DomainSeriesPoint, SeriesPoint, Severity, SeveritySeriesPoint
from ecocity.services.aggregation import WindowedAggregator
from ecocity.utils.signal_rows import SignalRow
from ecocity.utils.time_windows import DEFAULT_TIMESERIES_WINDOW, normalize_window, window_cutoff
from collections import Counter
from enum import Enum
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

BUCKET_DAY = "day"


class SeriesMode(str, Enum):
    TOTAL = "total"
    BY_DOMAIN = "by-domain"
    BY_SEVERITY = "by-severity"


def _day_key(row: SignalRow) -> Optional[str]:
    if row.created_at is None:
        return None
    return row.created_at.date().isoformat()


class TimeSeriesService(WindowedAggregator):

    def total_series(self, rows: List[SignalRow]) -> List[SeriesPoint]:
        counts: Counter = Counter()
        for row in rows:
            day = _day_key(row)
            if day is not None:
                counts[day] += 1
        return [SeriesPoint(t=day, count=counts[day]) for day in sorted(counts)]

    def domain_series(self, rows: List[SignalRow]) -> List[DomainSeriesPoint]:
        per_day: Dict[str, Counter] = {}
        for row in rows:
            day = _day_key(row)
            if day is not None:
                per_day.setdefault(day, Counter())[row.domain] += 1

        series = []
        for day in sorted(per_day):
            counts = per_day[day]
            series.append(DomainSeriesPoint(t=day, **{domain.value: counts[domain] for domain in Domain}))
        return series

    def severity_series(self, rows: List[SignalRow]) -> List[SeveritySeriesPoint]:
        per_day: Dict[str, Counter] = {}
        for row in rows:
            day = _day_key(row)
            if day is not None:
                per_day.setdefault(day, Counter())[row.severity] += 1

        series = []
        for day in sorted(per_day):
            counts = per_day[day]
            series.append(SeveritySeriesPoint(t=day, **{severity.value: counts[severity] for severity in Severity}))
        return series

    def get_series(
        self,
        window: Optional[str] = None,
        domain: Optional[str] = None,
        mode: SeriesMode = SeriesMode.TOTAL,
    ) -> Dict:
        """
        Daily counts over a lookback window.

        The domain filter only applies to the total mode; the split modes
        always cover every domain so their per-day sums equal the
        unfiltered total.

        Returns:
            {"window": <label used>, "bucket": "day", "series": [...]}
        """
        mode = SeriesMode(mode)
        window = normalize_window(window, DEFAULT_TIMESERIES_WINDOW)
        cutoff = window_cutoff(window, self.clock())

        if mode is SeriesMode.TOTAL:
            rows = self._load_rows(cutoff, domain=domain or None)
            series = self.total_series(rows)
        elif mode is SeriesMode.BY_DOMAIN:
            rows = self._load_rows(cutoff)
            series = self.domain_series(rows)
        else:
            rows = self._load_rows(cutoff)
            series = self.severity_series(rows)

        logger.info(f"Time series computed: mode={mode.value} window={window} rows={len(rows)} days={len(series)}")
        return {"window": window, "bucket": BUCKET_DAY, "series": series}
