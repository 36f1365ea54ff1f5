"""
Domain exceptions for EcoCity Signals.

Routes translate these into HTTP errors; services raise them.
"""


class EcoCityError(Exception):
    """Base class for all EcoCity errors."""


class InferenceError(EcoCityError):
    """The image inference collaborator could not produce a usable result."""


class StoreError(EcoCityError):
    """Reading from or writing to the report store failed."""


class ReportNotFoundError(EcoCityError):
    """No report exists with the requested id."""

    def __init__(self, report_id: str):
        super().__init__(f"Report not found: {report_id}")
        self.report_id = report_id
