from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from audit_web.domain.errors import InvalidReportNameError, ReportNotFoundError
from audit_web.domain.models import AuditResult, StoredReport
from audit_web.renderers.html_renderer import render_report

log = logging.getLogger(__name__)

REPORT_PREFIX = "audit-report-"
REPORT_SUFFIX = ".html"


def report_stamp(now: datetime) -> str:
    """2025-01-31T08:15:42.123+00:00 -> 2025-01-31T08-15-42 (filesystem safe, second precision)."""
    iso = now.astimezone(timezone.utc).isoformat()
    return iso.replace(":", "-").replace(".", "-")[:19]


def _stored(path: Path) -> StoredReport:
    st = path.stat()
    return StoredReport(
        filename=path.name,
        mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        size=st.st_size,
    )


@dataclass
class ReportRepository:
    """
    Repository pattern: owns the reports directory, report naming and lookups.
    """
    reports_dir: Path
    renderer: Callable[[AuditResult], str] = render_report

    def save(self, result: AuditResult, *, now: Optional[datetime] = None) -> StoredReport:
        data = self.renderer(result).encode("utf-8")
        self.reports_dir.mkdir(parents=True, exist_ok=True)

        stem = REPORT_PREFIX + report_stamp(now or datetime.now(timezone.utc))
        attempt = 1
        while True:
            name = f"{stem}{REPORT_SUFFIX}" if attempt == 1 else f"{stem}-{attempt}{REPORT_SUFFIX}"
            path = self.reports_dir / name
            try:
                # exclusive create: never overwrite a report written in the same second
                f = path.open("xb")
            except FileExistsError:
                attempt += 1
                continue

            try:
                with f:
                    f.write(data)
            except Exception:
                path.unlink(missing_ok=True)
                raise
            break

        log.info("Report saved: %s", path)
        return _stored(path)

    def list_reports(self) -> List[StoredReport]:
        if not self.reports_dir.is_dir():
            return []
        reports = [
            _stored(p)
            for p in self.reports_dir.iterdir()
            if p.is_file() and p.name.startswith(REPORT_PREFIX) and p.name.endswith(REPORT_SUFFIX)
        ]
        return sorted(reports, key=lambda r: r.mtime, reverse=True)

    def resolve(self, filename: str) -> Path:
        """Maps a requested name onto a path inside reports_dir, or raises InvalidReportNameError."""
        if not filename or not filename.endswith(REPORT_SUFFIX):
            raise InvalidReportNameError(f"Not a report name: {filename!r}")
        if "/" in filename or "\\" in filename or filename.startswith("."):
            raise InvalidReportNameError(f"Not a report name: {filename!r}")

        base = self.reports_dir.resolve()
        full = (base / filename).resolve()
        if full.parent != base:
            raise InvalidReportNameError(f"Not a report name: {filename!r}")
        return full

    def get(self, filename: str) -> str:
        full = self.resolve(filename)
        if not full.is_file():
            raise ReportNotFoundError(filename)
        return full.read_text(encoding="utf-8")
