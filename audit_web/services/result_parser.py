from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional

from audit_web.domain.errors import MalformedDataError, ResultNotFoundError
from audit_web.domain.models import AuditResult, AuditSummary, PageResult


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (round() would give 78.5 -> 78)."""
    return int(math.floor(value + 0.5))


def _fraction(raw: Any, category: str) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedDataError(f"Score for {category!r} is not a number: {raw!r}")
    try:
        value = float(raw)
    except OverflowError as e:
        raise MalformedDataError(f"Score for {category!r} is out of range: {raw!r}") from e
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def _category_score(entry: dict, category: str) -> float:
    """
    Reads one category score as a fraction in [0, 1].
    Nested lighthouse report wins; otherwise a flat field (number or {"score": n}).
    """
    report = entry.get("report")
    if isinstance(report, dict):
        categories = report.get("categories")
        if isinstance(categories, dict) and isinstance(categories.get(category), dict):
            return _fraction(categories[category].get("score"), category)

    flat = entry.get(category)
    if isinstance(flat, dict):
        flat = flat.get("score")
    return _fraction(flat, category)


def _route_path(entry: dict) -> str:
    for key in ("path", "route"):
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return "unknown"


def _route_entries(data: Any) -> List[dict]:
    """Normalizes both result shapes ({"routes": [...]} or a bare list) into one list."""
    if isinstance(data, dict):
        routes = data.get("routes", [])
    elif isinstance(data, list):
        routes = data
    else:
        raise MalformedDataError(f"Unexpected result document type: {type(data).__name__}")

    if not isinstance(routes, list):
        raise MalformedDataError("'routes' is not a list")

    for i, entry in enumerate(routes):
        if not isinstance(entry, dict):
            raise MalformedDataError(f"Route entry #{i} is not an object")
    return routes


def page_from_entry(entry: dict) -> PageResult:
    performance = round_half_up(_category_score(entry, "performance") * 100)
    seo = round_half_up(_category_score(entry, "seo") * 100)
    return PageResult(
        path=_route_path(entry),
        performance=performance,
        seo=seo,
        score=round_half_up((performance + seo) / 2),
    )


def _mean(values: Iterable[int]) -> int:
    values = list(values)
    return round_half_up(sum(values) / len(values)) if values else 0


def build_audit_result(data: Any, target_url: str, *, now: Optional[datetime] = None) -> AuditResult:
    pages = tuple(page_from_entry(e) for e in _route_entries(data))
    failed = tuple(p for p in pages if not p.passed)
    stamp = (now or datetime.now(timezone.utc)).isoformat()

    return AuditResult(
        url=target_url,
        timestamp=stamp,
        summary=AuditSummary(
            performance=_mean(p.performance for p in pages),
            seo=_mean(p.seo for p in pages),
        ),
        pages=pages,
        failed_pages=failed,
    )


def parse_result_file(result_path: Path, target_url: str, *, now: Optional[datetime] = None) -> AuditResult:
    """
    Reads the auditor's raw output file.

    Raises ResultNotFoundError when the file is absent and MalformedDataError when
    it cannot be decoded into one of the two known shapes.
    """
    if not result_path.is_file():
        raise ResultNotFoundError(f"Result file not found: {result_path}")

    try:
        data = json.loads(result_path.read_text(encoding="utf-8"))
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        raise MalformedDataError(f"Result file is not valid JSON: {e}") from e

    return build_audit_result(data, target_url, now=now)
