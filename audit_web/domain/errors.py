from __future__ import annotations


class AuditError(Exception):
    """Base class for audit pipeline errors."""


class ResultNotFoundError(AuditError):
    """The auditor has not written its result file (not run yet, or crashed before writing)."""


class MalformedDataError(AuditError):
    """The result file exists but does not hold usable structured data."""


class InvalidReportNameError(AuditError):
    """A requested report name failed the extension / directory check."""


class ReportNotFoundError(AuditError):
    pass


class AuditBusyError(AuditError):
    """Another audit run is still in flight."""

    def __init__(self, target_url: str):
        super().__init__(f"An audit is already running for {target_url}")
        self.target_url = target_url
