"""
Recommendation Generator - per-report suggested actions.

Maps (domain, issue types) to fixed action templates. Output is advisory
and shown to the citizen and the moderator; it triggers nothing.
"""

from ecocity.models.signals import GENERAL_REPORT, Domain, Priority, RecommendationAction
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# (title, detail template, priority); detail is formatted with {place}
Template = Tuple[str, str, Priority]


class RecommendationGenerator:
    """
    Template lookup with per-domain `general_report` fallback and title dedup.
    """

    TEMPLATES: Dict[Domain, Dict[str, Template]] = {
        Domain.WASTE: {
            "overflowing_bin": ("Increase waste collection frequency", "Bin overflow reported at {place}", Priority.HIGH),
            "illegal_dumping": ("Investigate illegal dumping site", "Illegal dumping reported at {place}", Priority.HIGH),
            "missed_collection": ("Reschedule waste collection", "Missed collection at {place}", Priority.MEDIUM),
            GENERAL_REPORT: ("Review waste management", "Waste issue reported at {place}", Priority.MEDIUM),
        },
        Domain.WATER: {
            "leak": ("Dispatch maintenance for pipe repair", "Water leak reported at {place}", Priority.HIGH),
            "water_wastage": ("Inspect water infrastructure", "Water wastage reported at {place}", Priority.MEDIUM),
            "flooding": ("Emergency drainage response", "Flooding reported at {place}", Priority.HIGH),
            GENERAL_REPORT: ("Review water infrastructure", "Water issue reported at {place}", Priority.MEDIUM),
        },
        Domain.POWER: {
            "streetlight_outage": ("Repair streetlight", "Streetlight outage at {place}", Priority.MEDIUM),
            "streetlight_on_daytime": (
                "Inspect streetlight timer/photocell",
                "Streetlight on during daytime at {place}",
                Priority.LOW,
            ),
            "overuse_report": ("Audit power consumption", "Power overuse reported at {place}", Priority.MEDIUM),
            GENERAL_REPORT: ("Review power infrastructure", "Power issue reported at {place}", Priority.MEDIUM),
        },
        Domain.ROADS: {
            "pothole": ("Schedule road repair", "Pothole reported at {place}", Priority.MEDIUM),
            "blocked_road": ("Clear road obstruction", "Road blocked at {place}", Priority.HIGH),
            GENERAL_REPORT: ("Inspect road condition", "Road issue reported at {place}", Priority.MEDIUM),
        },
        Domain.TRAFFIC: {
            "congestion": ("Review traffic flow", "Congestion reported at {place}", Priority.MEDIUM),
            "signal_fault": ("Repair traffic signal", "Signal fault at {place}", Priority.HIGH),
            GENERAL_REPORT: ("Review traffic management", "Traffic issue reported at {place}", Priority.MEDIUM),
        },
    }

    FALLBACK: Template = ("Review reported issue", "Issue reported at {place}", Priority.MEDIUM)

    def generate(
        self,
        domain: Domain,
        issue_types: List[str],
        place_text: Optional[str] = "",
    ) -> List[RecommendationAction]:
        """
        Build the recommended actions for one report.

        Returns:
            Non-empty list of actions, deduplicated by title, in issue-type order
        """
        place = place_text or ""
        try:
            domain_templates = self.TEMPLATES.get(Domain(domain), {})
        except ValueError:
            logger.debug(f"No recommendation templates for unknown domain {domain!r}")
            domain_templates = {}

        actions: List[RecommendationAction] = []
        seen_titles = set()
        for issue_type in issue_types:
            template = domain_templates.get(issue_type) or domain_templates.get(GENERAL_REPORT)
            if template is None:
                continue
            title, detail, priority = template
            if title in seen_titles:
                continue
            seen_titles.add(title)
            actions.append(RecommendationAction(title=title, detail=detail.format(place=place), priority=priority))

        if not actions:
            title, detail, priority = self.FALLBACK
            actions.append(RecommendationAction(title=title, detail=detail.format(place=place), priority=priority))

        return actions


_generator: Optional[RecommendationGenerator] = None


def get_recommendation_generator() -> RecommendationGenerator:
    """Get or create the RecommendationGenerator singleton."""
    global _generator
    if _generator is None:
        _generator = RecommendationGenerator()
    return _generator
