from __future__ import annotations

from datetime import datetime

from jinja2 import Environment, PackageLoader, select_autoescape

from audit_web.domain.models import PERFORMANCE_BUDGET, SEO_BUDGET, AuditResult

PASS_COLOR = "#22c55e"
FAIL_COLOR = "#ef4444"

_env = Environment(
    loader=PackageLoader("audit_web", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _color(passed: bool) -> str:
    return PASS_COLOR if passed else FAIL_COLOR


def _display_time(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return iso


_env.filters["color"] = _color


def render_report(result: AuditResult) -> str:
    """Pure: the same AuditResult always renders to the same document."""
    template = _env.get_template("report.html")
    return template.render(
        result=result,
        audited_at=_display_time(result.timestamp),
        performance_budget=PERFORMANCE_BUDGET,
        seo_budget=SEO_BUDGET,
    )


def render_template(name: str, **context) -> str:
    return _env.get_template(name).render(**context)
