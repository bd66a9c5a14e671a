from __future__ import annotations

import logging
from typing import Optional, Protocol

from audit_web.domain.models import AuditResult

log = logging.getLogger(__name__)


class Notifier(Protocol):
    """Port: how audit outcomes leave the system (email, webhook, ...)."""

    def send_report(
        self,
        result: AuditResult,
        is_partial: bool,
        exit_code: Optional[int],
        report_filename: Optional[str],
    ) -> None:
        ...

    def send_failure(self, target_url: str, exit_code: Optional[int], diagnostic_text: str) -> None:
        ...


class LoggingNotifier:
    """Fallback used when no email transport is configured."""

    def send_report(self, result, is_partial, exit_code, report_filename):
        log.info(
            "Audit %s for %s: %d pages, %d failed, perf=%d seo=%d, exit=%s, report=%s",
            "partially completed" if is_partial else "completed",
            result.url,
            len(result.pages),
            len(result.failed_pages),
            result.summary.performance,
            result.summary.seo,
            exit_code,
            report_filename or "-",
        )

    def send_failure(self, target_url, exit_code, diagnostic_text):
        log.error("Audit failed for %s (exit=%s): %s", target_url, exit_code, diagnostic_text.strip() or "-")
