"""Full report in JSON form, and the JSON building blocks shared with the console report."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import FailedRecord, NegativeStats, PositiveStats, Statistics, SummaryRow, TestRecord

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Characters that are written as unicode escapes so the JSON is safe inside HTML.
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _ansic_date(moment: datetime) -> str:
    """Format a moment like 'Mon Jan  2 15:04:05 2006'."""
    return (
        f"{_DAYS[moment.weekday()]} {_MONTHS[moment.month - 1]} "
        f"{moment.day:>2} {moment:%H:%M:%S} {moment.year}"
    )


def _normalize(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"unsupported value: {value!r}")
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def _dumps(data: dict[str, Any], error_message: str) -> str:
    """Serialize with four-space indentation and HTML-safe escapes."""
    try:
        normalized = _normalize(data)
    except ValueError as exc:
        raise ValueError(error_message) from exc
    text = json.dumps(normalized, indent=4, ensure_ascii=False)
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


def _test_sets(rows: Iterable[SummaryRow]) -> dict[str, dict[str, dict[str, Any]]]:
    sets: dict[str, dict[str, dict[str, Any]]] = {}
    for row in rows:
        sets.setdefault(row.test_set, {})[row.test_case] = {
            "percentage": row.percentage,
            "sent": row.sent,
            "blocked": row.blocked,
            "bypassed": row.bypassed,
            "unresolved": row.unresolved,
            "failed": row.failed,
        }
    return {name: dict(sorted(cases.items())) for name, cases in sorted(sets.items())}


def _tests_info(score: float, tests: NegativeStats | PositiveStats) -> dict[str, Any] | None:
    """Summarize one side of the tests, or None when it has no summary rows."""
    if not tests.summary_table:
        return None
    return {
        "score": score,
        "total_sent": tests.all_requests_number,
        "resolved_tests": tests.resolved_requests_number,
        "blocked_tests": tests.blocked_requests_number,
        "bypassed_tests": tests.bypassed_requests_number,
        "unresolved_tests": tests.unresolved_requests_number,
        "failed_tests": tests.failed_requests_number,
        "test_sets": _test_sets(tests.summary_table),
    }


def _report_head(
    stats: Statistics, report_time: datetime, waf_name: str, url: str, args: str
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "date": _ansic_date(report_time),
        "project_name": waf_name,
        "url": url,
    }
    if stats.score.average != 0:
        report["score"] = stats.score.average
    report["fp"] = stats.test_cases_fingerprint
    report["args"] = args
    return report


def _payload_details(record: TestRecord) -> dict[str, Any]:
    details: dict[str, Any] = {
        "payload": record.payload,
        "test_set": record.test_set,
        "test_case": record.test_case,
        "encoder": record.encoder,
        # The placeholder field carries the encoder name, as in earlier reports.
        "placeholder": record.encoder,
    }
    if record.response_status_code:
        details["status"] = record.response_status_code
    if record.additional_info:
        details["additional_info"] = list(record.additional_info)
    return details


def _failed_details(record: FailedRecord) -> dict[str, Any]:
    details: dict[str, Any] = {
        "payload": record.payload,
        "test_set": record.test_set,
        "test_case": record.test_case,
        "encoder": record.encoder,
        "placeholder": record.encoder,
    }
    if record.reason:
        details["reason"] = list(record.reason)
    return details


def _test_payloads(
    blocked: Iterable[TestRecord],
    bypassed: Iterable[TestRecord],
    unresolved: Iterable[TestRecord],
    failed: Iterable[FailedRecord],
) -> dict[str, Any]:
    sections = {
        "blocked": [_payload_details(r) for r in blocked],
        "bypassed": [_payload_details(r) for r in bypassed],
        "unresolved": [_payload_details(r) for r in unresolved],
        "failed": [_failed_details(r) for r in failed],
    }
    return {name: items for name, items in sections.items() if items}


def build_full_json_report(
    stats: Statistics,
    report_time: datetime,
    waf_name: str,
    url: str,
    args: str,
    ignore_unresolved: bool,
) -> dict[str, Any]:
    """Build the full report as JSON-ready data."""
    neg = stats.negative_tests
    pos = stats.positive_tests

    report = _report_head(stats, report_time, waf_name, url, args)

    summary: dict[str, Any] = {}
    negative = _tests_info(neg.resolved_blocked_requests_percentage, neg)
    if negative is not None:
        summary["negative"] = negative
    positive = _tests_info(pos.resolved_true_requests_percentage, pos)
    if positive is not None:
        summary["positive"] = positive
    report["summary"] = summary

    report["negative_payloads"] = _test_payloads(
        blocked=(),
        bypassed=neg.bypasses,
        unresolved=() if ignore_unresolved else neg.unresolved,
        failed=neg.failed,
    )
    report["positive_payloads"] = _test_payloads(
        blocked=pos.false_positive,
        bypassed=(),
        unresolved=() if ignore_unresolved else pos.unresolved,
        failed=pos.failed,
    )
    return report


def write_full_json_report(
    stats: Statistics,
    report_file: str | Path,
    report_time: datetime,
    waf_name: str,
    url: str,
    args: str,
    ignore_unresolved: bool,
) -> None:
    """Write the full report in JSON format to a file."""
    report = build_full_json_report(stats, report_time, waf_name, url, args, ignore_unresolved)
    text = _dumps(report, "couldn't dump report to JSON")
    Path(report_file).write_text(text, encoding="utf-8")