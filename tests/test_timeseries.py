"""Tests for daily time series."""

from datetime import timedelta

import pytest

from ecocity.services.timeseries_service import SeriesMode, TimeSeriesService
from ecocity.utils.signal_rows import parse_signal_rows


@pytest.fixture
def service(store, clock) -> TimeSeriesService:
    return TimeSeriesService(store=store, clock=clock)


@pytest.fixture
def mixed_reports(seed, make_report, now):
    return seed(
        make_report(domain="waste", severity="safe", created_at=now - timedelta(days=3, hours=1)),
        make_report(domain="water", issue_types=["leak"], severity="moderate", created_at=now - timedelta(days=3)),
        make_report(domain="roads", issue_types=["pothole"], severity="mild", created_at=now - timedelta(days=1, hours=1)),
        make_report(domain="waste", severity="mild", created_at=now - timedelta(hours=2)),
        make_report(domain="power", issue_types=["streetlight_outage"], created_at=now - timedelta(hours=1)),
    )


class TestTimeSeriesService:

    def test_total_series(self, service, mixed_reports):
        result = service.get_series(window="30d")

        assert result["window"] == "30d"
        assert result["bucket"] == "day"
        assert [(p.t, p.count) for p in result["series"]] == [
            ("2024-05-07", 2),
            ("2024-05-09", 1),
            ("2024-05-10", 2),
        ]

    def test_days_without_reports_are_absent(self, service, mixed_reports):
        days = [p.t for p in service.get_series()["series"]]
        assert "2024-05-08" not in days
        assert days == sorted(days)

    def test_domain_series_fills_every_domain(self, service, mixed_reports):
        series = service.get_series(mode=SeriesMode.BY_DOMAIN)["series"]

        first = series[0].model_dump()
        assert first == {"t": "2024-05-07", "waste": 1, "water": 1, "power": 0, "roads": 0, "traffic": 0, "other": 0}

    def test_severity_series(self, service, mixed_reports):
        series = service.get_series(mode=SeriesMode.BY_SEVERITY)["series"]
        assert series[-1].model_dump() == {"t": "2024-05-10", "safe": 1, "mild": 1, "moderate": 0}

    def test_split_series_sum_to_total(self, service, mixed_reports):
        totals = {p.t: p.count for p in service.get_series(mode=SeriesMode.TOTAL)["series"]}
        by_domain = service.get_series(mode=SeriesMode.BY_DOMAIN)["series"]
        by_severity = service.get_series(mode=SeriesMode.BY_SEVERITY)["series"]

        for point in by_domain:
            counts = point.model_dump()
            day = counts.pop("t")
            assert sum(counts.values()) == totals[day]
        for point in by_severity:
            counts = point.model_dump()
            day = counts.pop("t")
            assert sum(counts.values()) == totals[day]
        assert len(by_domain) == len(by_severity) == len(totals)

    def test_domain_filter_applies_to_total_only(self, service, mixed_reports):
        waste = service.get_series(domain="waste")["series"]
        assert [(p.t, p.count) for p in waste] == [("2024-05-07", 1), ("2024-05-10", 1)]

        by_domain = service.get_series(domain="waste", mode=SeriesMode.BY_DOMAIN)["series"]
        assert sum(p.water for p in by_domain) == 1

    def test_window_limits_range(self, service, mixed_reports):
        result = service.get_series(window="24h")
        assert [(p.t, p.count) for p in result["series"]] == [("2024-05-10", 2)]

    def test_unrecognized_window_defaults_to_thirty_days(self, service, mixed_reports):
        assert service.get_series(window="forever")["window"] == "30d"

    def test_unparseable_timestamps_are_skipped(self, service, make_report):
        good = make_report()
        bad = make_report()
        bad["created_at"] = "garbage"

        series = service.total_series(parse_signal_rows([good, bad]))

        assert [(p.t, p.count) for p in series] == [("2024-05-10", 1)]
