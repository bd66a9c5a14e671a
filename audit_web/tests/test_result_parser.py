from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from audit_web.domain.errors import MalformedDataError, ResultNotFoundError
from audit_web.services.result_parser import (
    build_audit_result,
    parse_result_file,
    round_half_up,
)

URL = "https://terrariawars.com"
NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# -----------------------------
# Helpers
# -----------------------------
def nested_route(path: str, performance: float, seo: float) -> dict:
    return {
        "path": path,
        "report": {"categories": {"performance": {"score": performance}, "seo": {"score": seo}}},
    }


def flat_route(path: str, performance: float, seo: float) -> dict:
    return {"path": path, "performance": performance, "seo": seo}


def write_json(tmp_path: Path, data) -> Path:
    p = tmp_path / "ci-result.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


# -----------------------------
# File handling
# -----------------------------
def test_missing_file_raises_not_found(tmp_path: Path):
    with pytest.raises(ResultNotFoundError):
        parse_result_file(tmp_path / "ci-result.json", URL)


def test_invalid_json_raises_malformed(tmp_path: Path):
    p = tmp_path / "ci-result.json"
    p.write_text("{ not json", encoding="utf-8")
    with pytest.raises(MalformedDataError):
        parse_result_file(p, URL)


def test_deeply_nested_json_raises_malformed(tmp_path: Path):
    p = tmp_path / "ci-result.json"
    p.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    with pytest.raises(MalformedDataError):
        parse_result_file(p, URL)


def test_parse_wrapped_routes_shape(tmp_path: Path):
    p = write_json(tmp_path, {"routes": [nested_route("/", 0.95, 0.92), nested_route("/wiki", 0.61, 1.0)]})

    result = parse_result_file(p, URL, now=NOW)

    assert result.url == URL
    assert result.timestamp == NOW.isoformat()
    assert [(pg.path, pg.performance, pg.seo) for pg in result.pages] == [("/", 95, 92), ("/wiki", 61, 100)]
    assert [pg.path for pg in result.failed_pages] == ["/wiki"]
    assert result.summary.performance == 78
    assert result.summary.seo == 96


def test_parse_bare_list_shape(tmp_path: Path):
    p = write_json(tmp_path, [flat_route("/", 0.8, 0.9), flat_route("/news", 0.79, 0.95)])

    result = parse_result_file(p, URL, now=NOW)

    assert len(result.pages) == 2
    assert result.pages[0].passed
    assert [pg.path for pg in result.failed_pages] == ["/news"]


# -----------------------------
# Route entries
# -----------------------------
def test_score_is_rounded_half_up_average():
    result = build_audit_result([flat_route("/", 0.95, 0.60)], URL, now=NOW)
    assert result.pages[0].score == 78      # (95 + 60) / 2 = 77.5


def test_flat_score_objects_are_accepted():
    entry = {"route": "/about", "performance": {"score": 0.5}, "seo": {"score": 0.99}}
    page = build_audit_result([entry], URL).pages[0]
    assert (page.path, page.performance, page.seo) == ("/about", 50, 99)


def test_nested_report_wins_over_flat_fields():
    entry = nested_route("/", 0.9, 0.9)
    entry.update(performance=0.1, seo=0.1)
    page = build_audit_result([entry], URL).pages[0]
    assert (page.performance, page.seo) == (90, 90)


def test_missing_scores_and_path_default():
    page = build_audit_result([{}], URL).pages[0]
    assert page.path == "unknown"
    assert (page.performance, page.seo, page.score) == (0, 0, 0)


def test_null_scores_default_to_zero():
    page = build_audit_result([flat_route("/", None, None)], URL).pages[0]
    assert (page.performance, page.seo) == (0, 0)


def test_out_of_range_fractions_are_clamped():
    page = build_audit_result([flat_route("/", 1.7, -0.2)], URL).pages[0]
    assert (page.performance, page.seo) == (100, 0)


def test_object_without_routes_is_empty_result():
    result = build_audit_result({"summary": {}}, URL)
    assert result.pages == ()
    assert result.failed_pages == ()
    assert (result.summary.performance, result.summary.seo) == (0, 0)


@pytest.mark.parametrize(
    "data",
    [
        "just a string",
        42,
        {"routes": {"/": {}}},
        ["not an object"],
        [flat_route("/", "fast", 0.9)],
        [flat_route("/", True, 0.9)],
        [flat_route("/", 10 ** 400, 0.9)],
        [{"path": "/", "report": {"categories": {"seo": {"score": -(10 ** 400)}}}}],
    ],
)
def test_unusable_shapes_raise_malformed(data):
    with pytest.raises(MalformedDataError):
        build_audit_result(data, URL)


def test_round_half_up():
    assert round_half_up(77.5) == 78
    assert round_half_up(78.5) == 79
    assert round_half_up(77.49) == 77
    assert round_half_up(0) == 0


# -----------------------------
# Properties
# -----------------------------
scores = st.integers(min_value=0, max_value=100)
routes = st.lists(st.tuples(scores, scores), max_size=30)


@settings(max_examples=200, deadline=None)
@given(routes=routes)
def test_failed_pages_are_exactly_pages_below_budget(routes):
    data = [flat_route(f"/p{i}", perf / 100, seo / 100) for i, (perf, seo) in enumerate(routes)]

    result = build_audit_result(data, URL, now=NOW)

    expected = [p for p in result.pages if p.performance < 80 or p.seo < 90]
    assert list(result.failed_pages) == expected
    for page in result.pages:
        assert 0 <= page.performance <= 100
        assert 0 <= page.seo <= 100


@settings(max_examples=200, deadline=None)
@given(routes=routes)
def test_summary_is_rounded_mean_or_zero(routes):
    data = {"routes": [flat_route(f"/p{i}", perf / 100, seo / 100) for i, (perf, seo) in enumerate(routes)]}

    result = build_audit_result(data, URL, now=NOW)

    if not result.pages:
        assert (result.summary.performance, result.summary.seo) == (0, 0)
    else:
        n = len(result.pages)
        assert result.summary.performance == round_half_up(sum(p.performance for p in result.pages) / n)
        assert result.summary.seo == round_half_up(sum(p.seo for p in result.pages) / n)
