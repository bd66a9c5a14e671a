######## models.py
########

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

# Budget thresholds: a page passes only when both categories meet them.
PERFORMANCE_BUDGET = 80
SEO_BUDGET = 90


@dataclass(frozen=True)
class PageResult:
    path: str
    performance: int            # 0-100
    seo: int                    # 0-100
    score: int                  # round((performance + seo) / 2)

    @property
    def performance_passed(self) -> bool:
        return self.performance >= PERFORMANCE_BUDGET

    @property
    def seo_passed(self) -> bool:
        return self.seo >= SEO_BUDGET

    @property
    def passed(self) -> bool:
        return self.performance_passed and self.seo_passed


@dataclass(frozen=True)
class AuditSummary:
    performance: int
    seo: int


@dataclass(frozen=True)
class AuditResult:
    url: str
    timestamp: str              # ISO-8601
    summary: AuditSummary
    pages: Tuple[PageResult, ...] = ()
    failed_pages: Tuple[PageResult, ...] = ()

    @property
    def passed_count(self) -> int:
        return len(self.pages) - len(self.failed_pages)


@dataclass(frozen=True)
class StoredReport:
    filename: str
    mtime: datetime
    size: int


@dataclass(frozen=True)
class ProcessOutcome:
    exit_code: Optional[int]    # None: killed by a signal or never launched
    stderr: str = ""


class AuditOutcome(Enum):
    SUCCESS = "success"
    SUCCESS_WITH_PARSE_FAILURE = "success_with_parse_failure"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"

    @property
    def is_error(self) -> bool:
        return self in (AuditOutcome.SUCCESS_WITH_PARSE_FAILURE, AuditOutcome.TOTAL_FAILURE)

    @property
    def is_partial(self) -> bool:
        return self is AuditOutcome.PARTIAL_FAILURE


@dataclass(frozen=True)
class AuditRun:
    """Bookkeeping for the run currently in flight."""
    target_url: str
    started_at: datetime
