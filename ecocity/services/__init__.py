"""
Services layer - business logic goes here.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Signal extraction runs once per report, at ingestion
- Aggregators (hotspots, insights, time series, dashboard) only read
"""
