from __future__ import annotations

from typing import Optional

from audit_web.domain.models import AuditOutcome, AuditResult

PARSE_FAILURE_REASON = "audit completed but result parsing failed"


def classify(exit_code: Optional[int], result: Optional[AuditResult]) -> AuditOutcome:
    """
    Decides the terminal outcome of one audit run.

    A non-zero exit is not conclusive on its own: the auditor can crash after
    writing part of its result set, and any scored pages are still reported.
    """
    if exit_code == 0:
        if result is not None:
            return AuditOutcome.SUCCESS
        return AuditOutcome.SUCCESS_WITH_PARSE_FAILURE

    if result is not None and result.pages:
        return AuditOutcome.PARTIAL_FAILURE
    return AuditOutcome.TOTAL_FAILURE


def should_store_report(outcome: AuditOutcome, result: Optional[AuditResult]) -> bool:
    """Only outcomes carrying scored pages produce a stored report."""
    return (
        outcome in (AuditOutcome.SUCCESS, AuditOutcome.PARTIAL_FAILURE)
        and result is not None
        and bool(result.pages)
    )
