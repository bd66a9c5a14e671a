from .errors import (
    AuditBusyError,
    AuditError,
    InvalidReportNameError,
    MalformedDataError,
    ReportNotFoundError,
    ResultNotFoundError,
)
from .models import (
    AuditOutcome,
    AuditResult,
    AuditRun,
    AuditSummary,
    PageResult,
    ProcessOutcome,
    StoredReport,
)

__all__ = [
    "AuditBusyError",
    "AuditError",
    "InvalidReportNameError",
    "MalformedDataError",
    "ReportNotFoundError",
    "ResultNotFoundError",
    "AuditOutcome",
    "AuditResult",
    "AuditRun",
    "AuditSummary",
    "PageResult",
    "ProcessOutcome",
    "StoredReport",
]
