"""Tests for municipal-level insight recommendations."""

import pytest

from ecocity.models.signals import Priority
from ecocity.services.insight_service import InsightService, priority_for_count


@pytest.fixture
def service(store, clock) -> InsightService:
    return InsightService(store=store, clock=clock)


class TestPriorityForCount:

    @pytest.mark.parametrize(
        "count,expected",
        [
            (10, Priority.HIGH),
            (9, Priority.MEDIUM),
            (3, Priority.MEDIUM),
            (2, Priority.LOW),
            (1, Priority.LOW),
        ],
    )
    def test_boundaries(self, count, expected):
        assert priority_for_count(count) == expected


class TestInsightService:

    def test_title_and_rationale(self, service, seed, make_report):
        seed(*[make_report() for _ in range(3)])

        result = service.get_recommendations(window="7d")

        assert result["window"] == "7d"
        insight = result["recommendations"][0]
        assert insight.domain == "waste"
        assert insight.area_key == "area:downtown"
        assert insight.title == "Increase waste management attention in area:downtown"
        assert insight.rationale == "3 reports in the last 7d"
        assert insight.priority == Priority.MEDIUM
        assert insight.supporting_hotspot.model_dump() == {"issue_type": "multiple", "count": 3}

    def test_issue_type_not_part_of_key(self, service, seed, make_report):
        seed(
            make_report(issue_types=["overflowing_bin", "illegal_dumping"]),
            make_report(issue_types=["missed_collection"]),
        )

        recommendations = service.get_recommendations()["recommendations"]

        assert len(recommendations) == 1
        assert recommendations[0].supporting_hotspot.count == 2

    def test_truncated_to_ten(self, service, seed, make_report):
        seed(*[make_report(area_key=f"area:zone_{i}") for i in range(12)])
        assert len(service.get_recommendations()["recommendations"]) == 10

    def test_sorted_by_count(self, service, seed, make_report):
        seed(
            make_report(domain="water", issue_types=["leak"], area_key="area:riverside"),
            *[make_report(domain="roads", issue_types=["pothole"], area_key="area:ring_road") for _ in range(10)],
        )

        recommendations = service.get_recommendations()["recommendations"]

        assert [r.domain for r in recommendations] == ["roads", "water"]
        assert recommendations[0].priority == Priority.HIGH
        assert recommendations[0].title == "Schedule road maintenance in area:ring_road"
        assert recommendations[1].priority == Priority.LOW

    def test_other_domain_phrase(self, service, seed, make_report):
        seed(make_report(signals=None, domain="other", issue_types=["general_report"], area_key=None))

        insight = service.get_recommendations()["recommendations"][0]

        assert insight.title == "Review reported issues in unknown"

    def test_rationale_echoes_normalized_window(self, service, seed, make_report):
        seed(make_report())
        result = service.get_recommendations(window="bogus")
        assert result["window"] == "7d"
        assert result["recommendations"][0].rationale == "1 reports in the last 7d"
