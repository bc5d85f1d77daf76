"""Assemble the data that the full HTML/PDF report template is filled with."""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from .charts import generate_chart_data, is_api_test
from .grading import COMPARISON_TABLE, compute_grade
from .models import (
    NA_MARK,
    VERSION,
    HtmlReport,
    SecurityGrades,
    Statistics,
    SummaryRow,
    TestDetails,
    TestRecord,
    TestSetSummary,
)

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _format_testing_date(moment: datetime) -> str:
    return f"{moment.day:02d} {_MONTHS[moment.month - 1]} {moment.year:04d}"


def _round2(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    if math.isnan(value) or math.isinf(value):
        return value
    return math.copysign(math.floor(abs(value) * 100 + 0.5) / 100, value)


def _count_by_category(
    hits: Iterable[TestRecord], misses: Iterable[TestRecord]
) -> tuple[int, int, int, int]:
    """Return (api hits, api total, app hits, app total)."""
    api_hits = api_total = app_hits = app_total = 0
    for test in hits:
        if is_api_test(test.test_set):
            api_hits += 1
            api_total += 1
        else:
            app_hits += 1
            app_total += 1
    for test in misses:
        if is_api_test(test.test_set):
            api_total += 1
        else:
            app_total += 1
    return api_hits, api_total, app_hits, app_total


def _security_grades(neg_hits: int, neg_total: int, pos_hits: int, pos_total: int) -> SecurityGrades:
    true_negative = compute_grade(neg_hits, neg_total)
    true_positive = compute_grade(pos_hits, pos_total)
    divider = sum(g.mark != NA_MARK for g in (true_negative, true_positive))
    grade = compute_grade(true_negative.percentage + true_positive.percentage, divider)
    return SecurityGrades(true_negative, true_positive, grade)


def _summarize(rows: Iterable[SummaryRow]) -> dict[str, TestSetSummary]:
    table: dict[str, TestSetSummary] = {}
    for row in rows:
        summary = table.setdefault(row.test_set, TestSetSummary())
        summary.test_cases.append(row)
        summary.sent += row.sent
        summary.blocked += row.blocked
        summary.bypassed += row.bypassed
        summary.unresolved += row.unresolved
        summary.failed += row.failed
        if row.blocked + row.bypassed != 0:
            summary.resolved_test_cases_number += 1
            summary.percentage += row.percentage

    for summary in table.values():
        if summary.resolved_test_cases_number:
            summary.percentage = _round2(
                summary.percentage / summary.resolved_test_cases_number
            )
        else:
            # No resolved cases: the average is undefined.
            summary.percentage = math.nan
    return table


def _add_details(
    by_status: dict[int, TestDetails], record: TestRecord
) -> None:
    details = by_status.setdefault(record.response_status_code, TestDetails())
    details.test_case = record.test_case
    details.encoders[record.encoder] = None
    details.placeholders[record.placeholder] = None


def _group_by_payload(records: Iterable[TestRecord]) -> dict[str, dict[int, TestDetails]]:
    grouped: dict[str, dict[int, TestDetails]] = {}
    for record in records:
        _add_details(grouped.setdefault(record.payload, {}), record)
    return grouped


def _group_by_paths(
    records: Iterable[TestRecord],
) -> dict[str, dict[str, dict[int, TestDetails]]]:
    grouped: dict[str, dict[str, dict[int, TestDetails]]] = {}
    for record in records:
        paths = "\n".join(record.additional_info)
        by_payload = grouped.setdefault(paths, {})
        _add_details(by_payload.setdefault(record.payload, {}), record)
    return grouped


def prepare_html_full_report(
    stats: Statistics,
    report_time: datetime,
    waf_name: str,
    url: str,
    openapi_file: str,
    args: str,
    ignore_unresolved: bool,
) -> HtmlReport:
    """Build the report data inserted into the HTML template."""
    data = HtmlReport(
        ignore_unresolved=ignore_unresolved,
        waf_name=waf_name,
        url=url,
        waf_testing_date=_format_testing_date(report_time),
        gtw_version=VERSION,
        test_cases_fp=stats.test_cases_fingerprint,
        openapi_file=openapi_file,
        args=args,
        comparison_table=COMPARISON_TABLE,
    )

    neg = stats.negative_tests
    pos = stats.positive_tests

    api_neg_blocked, api_neg, app_neg_blocked, app_neg = _count_by_category(
        neg.blocked, neg.bypasses
    )
    api_pos_bypassed, api_pos, app_pos_bypassed, app_pos = _count_by_category(
        pos.true_positive, pos.false_positive
    )

    data.api_sec = _security_grades(api_neg_blocked, api_neg, api_pos_bypassed, api_pos)
    data.app_sec = _security_grades(app_neg_blocked, app_neg, app_pos_bypassed, app_pos)

    divider = sum(g.grade.mark != NA_MARK for g in (data.api_sec, data.app_sec))
    data.overall = compute_grade(
        data.api_sec.grade.percentage + data.app_sec.grade.percentage, divider
    )

    api_indicators, api_items, app_indicators, app_items = generate_chart_data(stats)
    data.api_sec_chart_data.indicators = api_indicators
    data.api_sec_chart_data.items = api_items
    data.app_sec_chart_data.indicators = app_indicators
    data.app_sec_chart_data.items = app_items

    data.negative_tests.summary_table = _summarize(neg.summary_table)
    data.positive_tests.summary_table = _summarize(pos.summary_table)

    data.scanned_paths = stats.paths

    section = data.negative_tests
    section.bypassed = _group_by_paths(neg.bypasses)
    section.unresolved = _group_by_payload(neg.unresolved)
    section.failed = neg.failed
    section.percentage = stats.waf_score
    section.total_sent = neg.all_requests_number
    section.blocked_requests_number = neg.blocked_requests_number
    section.bypassed_requests_number = neg.bypassed_requests_number
    section.unresolved_requests_number = neg.unresolved_requests_number
    section.failed_requests_number = neg.failed_requests_number

    psection = data.positive_tests
    psection.blocked = _group_by_payload(pos.false_positive)
    psection.bypassed = _group_by_payload(pos.true_positive)
    psection.unresolved = _group_by_payload(pos.unresolved)
    psection.failed = pos.failed
    psection.percentage = pos.resolved_true_requests_percentage
    psection.total_sent = pos.all_requests_number
    psection.blocked_requests_number = pos.blocked_requests_number
    psection.bypassed_requests_number = pos.bypassed_requests_number
    psection.unresolved_requests_number = pos.unresolved_requests_number
    psection.failed_requests_number = pos.failed_requests_number

    data.total_sent = section.total_sent + psection.total_sent
    data.blocked_requests_number = (
        section.blocked_requests_number + psection.blocked_requests_number
    )
    data.bypassed_requests_number = (
        section.bypassed_requests_number + psection.bypassed_requests_number
    )
    data.unresolved_requests_number = (
        section.unresolved_requests_number + psection.unresolved_requests_number
    )
    data.failed_requests_number = (
        section.failed_requests_number + psection.failed_requests_number
    )

    return data