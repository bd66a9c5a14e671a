from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from audit_web.domain.errors import AuditBusyError, MalformedDataError, ResultNotFoundError
from audit_web.domain.models import AuditOutcome, AuditResult, AuditRun, ProcessOutcome
from audit_web.repositories.report_repository import ReportRepository
from audit_web.services.notifier import Notifier
from audit_web.services.outcome_classifier import PARSE_FAILURE_REASON, classify, should_store_report
from audit_web.services.process_runner import ProcessRunner
from audit_web.services.result_parser import parse_result_file
from audit_web.services.url_normalization import UrlNormalizer

log = logging.getLogger(__name__)


@dataclass
class AuditService:
    """
    Service layer: starts one audit at a time and, when the auditor exits,
    runs parse -> classify -> store -> notify as a single continuation.
    """
    runner: ProcessRunner
    report_repo: ReportRepository
    notifier: Notifier
    url_normalizer: UrlNormalizer
    result_path: Path
    default_url: str
    timeout_seconds: Optional[int] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _current: Optional[AuditRun] = field(default=None, init=False, repr=False)

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def current_run(self) -> Optional[AuditRun]:
        return self._current

    def start(self, url_raw: str = "") -> str:
        """
        Kicks off an audit and returns the normalized target url immediately.
        Raises AuditBusyError while another run is in flight.
        """
        target_url = self.url_normalizer.normalize(url_raw) or self.default_url
        if not target_url:
            raise ValueError("Target url is required.")

        if not self._lock.acquire(blocking=False):
            running = self._current.target_url if self._current else target_url
            raise AuditBusyError(running)

        try:
            self._current = AuditRun(target_url=target_url, started_at=datetime.now(timezone.utc))
            self._discard_stale_result()
            self.runner.run(
                target_url,
                lambda outcome: self.handle_completion(target_url, outcome),
                timeout_seconds=self.timeout_seconds,
            )
        except Exception:
            self._release()
            raise

        return target_url

    def handle_completion(self, target_url: str, outcome: ProcessOutcome) -> AuditOutcome:
        try:
            return self._complete(target_url, outcome)
        finally:
            self._release()

    def _complete(self, target_url: str, process: ProcessOutcome) -> AuditOutcome:
        result = self._parse(target_url)
        outcome = classify(process.exit_code, result)
        log.info("Audit for %s finished: exit=%s outcome=%s", target_url, process.exit_code, outcome.value)

        report_filename = None
        if should_store_report(outcome, result):
            try:
                report_filename = self.report_repo.save(result).filename
            except Exception:
                log.exception("Failed to store report for %s", target_url)

        try:
            if outcome is AuditOutcome.SUCCESS or outcome is AuditOutcome.PARTIAL_FAILURE:
                self.notifier.send_report(result, outcome.is_partial, process.exit_code, report_filename)
            elif outcome is AuditOutcome.SUCCESS_WITH_PARSE_FAILURE:
                self.notifier.send_failure(target_url, process.exit_code, PARSE_FAILURE_REASON)
            else:
                self.notifier.send_failure(target_url, process.exit_code, process.stderr)
        except Exception:
            log.exception("Notification failed for %s (%s)", target_url, outcome.value)

        return outcome

    def _parse(self, target_url: str) -> Optional[AuditResult]:
        try:
            return parse_result_file(self.result_path, target_url)
        except ResultNotFoundError as e:
            log.warning("%s", e)
        except MalformedDataError as e:
            log.error("Could not parse audit result: %s", e)
        except Exception:
            log.exception("Unexpected error reading audit result %s", self.result_path)
        return None

    def _discard_stale_result(self) -> None:
        # The auditor overwrites a single well-known file; a leftover from an
        # earlier run must not be mistaken for this run's output.
        try:
            self.result_path.unlink()
        except FileNotFoundError:
            pass

    def _release(self) -> None:
        self._current = None
        if self._lock.locked():
            self._lock.release()
