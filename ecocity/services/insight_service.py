"""
Insight Service - municipal-level recommendations per (domain, area).

Issue type is NOT part of the grouping key here; every report counts once
towards its (domain, area key) group.
"""

from ecocity.models.signals import Domain, InsightRecommendation, Priority, SupportingHotspot
from ecocity.services.aggregation import WindowedAggregator
from ecocity.utils.signal_rows import SignalRow
from ecocity.utils.time_windows import DEFAULT_HOTSPOT_WINDOW, normalize_window, window_cutoff
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 10
HIGH_PRIORITY_MIN_COUNT = 10
LOW_PRIORITY_MAX_COUNT = 2

DOMAIN_TITLES: Dict[Domain, str] = {
    Domain.WASTE: "Increase waste management attention",
    Domain.WATER: "Address water infrastructure issues",
    Domain.POWER: "Review power/lighting infrastructure",
    Domain.ROADS: "Schedule road maintenance",
    Domain.TRAFFIC: "Improve traffic management",
    Domain.OTHER: "Review reported issues",
}


def priority_for_count(count: int) -> Priority:
    if count >= HIGH_PRIORITY_MIN_COUNT:
        return Priority.HIGH
    if count <= LOW_PRIORITY_MAX_COUNT:
        return Priority.LOW
    return Priority.MEDIUM


class InsightService(WindowedAggregator):

    def group(self, rows: List[SignalRow], window: str) -> List[InsightRecommendation]:
        counts: Dict[Tuple[Domain, str], int] = {}
        for row in rows:
            key = (row.domain, row.area_key_or_unknown)
            counts[key] = counts.get(key, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:MAX_INSIGHTS]

        insights = []
        for (domain, area_key), count in ranked:
            phrase = DOMAIN_TITLES.get(domain, DOMAIN_TITLES[Domain.OTHER])
            insights.append(
                InsightRecommendation(
                    domain=domain.value,
                    area_key=area_key,
                    priority=priority_for_count(count),
                    title=f"{phrase} in {area_key}",
                    rationale=f"{count} reports in the last {window}",
                    supporting_hotspot=SupportingHotspot(count=count),
                )
            )
        return insights

    def get_recommendations(self, window: Optional[str] = None) -> Dict:
        """
        Prioritized recommendations for the busiest (domain, area) groups.

        Returns:
            {"window": <label used>, "recommendations": [InsightRecommendation, ...]}
        """
        window = normalize_window(window, DEFAULT_HOTSPOT_WINDOW)
        rows = self._load_rows(window_cutoff(window, self.clock()))
        recommendations = self.group(rows, window)

        logger.info(f"Insights computed: window={window} rows={len(rows)} groups={len(recommendations)}")
        return {"window": window, "recommendations": recommendations}
