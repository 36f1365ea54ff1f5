"""
Hotspot Service - ranked (domain, issue type, area) buckets over a window.

KEY PRINCIPLE:
- One report fans out to one bucket PER issue type it carries
- Buckets live in an insertion-ordered dict, so count ties keep
  first-seen order and repeated runs rank identically
"""

from ecocity.models.signals import Hotspot
from ecocity.services.aggregation import WindowedAggregator
from ecocity.utils.signal_rows import SignalRow
from ecocity.utils.time_windows import DEFAULT_HOTSPOT_WINDOW, normalize_window, window_cutoff
from typing import Dict, List, Optional, Tuple
import logging
import math

logger = logging.getLogger(__name__)

MAX_HOTSPOTS = 20
MAX_TOP_PLACES = 3
MAX_SAMPLE_IDS = 5

BucketKey = Tuple[str, str, str]


class _HotspotBucket:
    __slots__ = ("domain", "issue_type", "area_key", "count", "scores", "places", "sample_ids")

    def __init__(self, domain: str, issue_type: str, area_key: str):
        self.domain = domain
        self.issue_type = issue_type
        self.area_key = area_key
        self.count = 0
        self.scores: List[float] = []
        self.places: List[str] = []
        self.sample_ids: List[str] = []

    def add(self, row: SignalRow) -> None:
        self.count += 1
        self.scores.append(row.severity.score)
        if row.place_text and row.place_text not in self.places and len(self.places) < MAX_TOP_PLACES:
            self.places.append(row.place_text)
        if len(self.sample_ids) < MAX_SAMPLE_IDS:
            self.sample_ids.append(row.id)

    def to_hotspot(self) -> Hotspot:
        return Hotspot(
            domain=self.domain,
            issue_type=self.issue_type,
            area_key=self.area_key,
            count=self.count,
            avg_severity=math.fsum(self.scores) / len(self.scores),
            top_places=list(self.places),
            sample_ids=list(self.sample_ids),
        )


class HotspotService(WindowedAggregator):
    """Groups stored signals into ranked hotspots."""

    def group(self, rows: List[SignalRow]) -> List[Hotspot]:
        """
        Fold rows into hotspots, ranked by count.

        Args:
            rows: Normalized signal rows, in store order

        Returns:
            At most MAX_HOTSPOTS hotspots, count descending, ties first-seen
        """
        buckets: Dict[BucketKey, _HotspotBucket] = {}

        for row in rows:
            domain = row.domain.value
            area_key = row.area_key_or_unknown
            for issue_type in row.issue_types:
                key = (domain, issue_type, area_key)
                bucket = buckets.get(key)
                if bucket is None:
                    bucket = buckets[key] = _HotspotBucket(domain, issue_type, area_key)
                bucket.add(row)

        # sorted() is stable: equal counts keep insertion order
        ranked = sorted(buckets.values(), key=lambda b: b.count, reverse=True)
        return [bucket.to_hotspot() for bucket in ranked[:MAX_HOTSPOTS]]

    def get_hotspots(self, window: Optional[str] = None, domain: Optional[str] = None) -> Dict:
        """
        Hotspots for a lookback window and optional domain filter.

        Returns:
            {"window": <label used>, "hotspots": [Hotspot, ...]}
        """
        window = normalize_window(window, DEFAULT_HOTSPOT_WINDOW)
        cutoff = window_cutoff(window, self.clock())
        rows = self._load_rows(cutoff, domain=domain or None)
        hotspots = self.group(rows)

        logger.info(f"Hotspots computed: window={window} domain={domain or '*'} rows={len(rows)} buckets={len(hotspots)}")
        return {"window": window, "hotspots": hotspots}
