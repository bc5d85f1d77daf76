"""Data structures for scan statistics and report rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

VERSION = "unknown"

NA_MARK = "N/A"


def map_keys_to_string(m: Mapping[str, Any], sep: str) -> str:
    """Join the keys of a mapping with a separator."""
    return sep.join(m)


@dataclass
class Grade:
    """A percentage score together with its letter mark."""

    percentage: float = 0.0
    mark: str = NA_MARK
    css_class_suffix: str = "na"

    def to_dict(self) -> dict[str, Any]:
        return {
            "percentage": self.percentage,
            "mark": self.mark,
            "css_class_suffix": self.css_class_suffix,
        }


@dataclass
class ComparisonTableRow:
    """A reference result of another WAF shown for comparison."""

    name: str
    api_sec: Grade
    app_sec: Grade
    overall_score: Grade

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "api_sec": self.api_sec.to_dict(),
            "app_sec": self.app_sec.to_dict(),
            "overall_score": self.overall_score.to_dict(),
        }


@dataclass
class TestDetails:
    """Encoders and placeholders seen for one payload and status code."""

    __test__ = False

    test_case: str = ""
    encoders: dict[str, None] = field(default_factory=dict)
    placeholders: dict[str, None] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_case": self.test_case,
            "encoders": dict.fromkeys(self.encoders),
            "placeholders": dict.fromkeys(self.placeholders),
        }


@dataclass
class SummaryRow:
    """Per test case summary produced by the statistics stage."""

    test_set: str
    test_case: str
    percentage: float = 0.0
    sent: int = 0
    blocked: int = 0
    bypassed: int = 0
    unresolved: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_set": self.test_set,
            "test_case": self.test_case,
            "percentage": self.percentage,
            "sent": self.sent,
            "blocked": self.blocked,
            "bypassed": self.bypassed,
            "unresolved": self.unresolved,
            "failed": self.failed,
        }


@dataclass
class TestSetSummary:
    """Aggregated results of all test cases in one test set."""

    __test__ = False

    test_cases: list[SummaryRow] = field(default_factory=list)
    percentage: float = 0.0
    sent: int = 0
    blocked: int = 0
    bypassed: int = 0
    unresolved: int = 0
    failed: int = 0
    resolved_test_cases_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_cases": [row.to_dict() for row in self.test_cases],
            "percentage": self.percentage,
            "sent": self.sent,
            "blocked": self.blocked,
            "bypassed": self.bypassed,
            "unresolved": self.unresolved,
            "failed": self.failed,
            "resolved_test_cases_number": self.resolved_test_cases_number,
        }


@dataclass
class ChartData:
    """Radar chart labels, values and the rendered chart script."""

    indicators: list[str] = field(default_factory=list)
    items: list[float] = field(default_factory=list)
    chart: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"indicators": list(self.indicators), "items": list(self.items)}


@dataclass
class SecurityGrades:
    """True-negative, true-positive and combined grades of a category."""

    true_negative: Grade = field(default_factory=Grade)
    true_positive: Grade = field(default_factory=Grade)
    grade: Grade = field(default_factory=Grade)

    def to_dict(self) -> dict[str, Any]:
        return {
            "true_negative": self.true_negative.to_dict(),
            "true_positive": self.true_positive.to_dict(),
            "grade": self.grade.to_dict(),
        }


@dataclass
class TestRecord:
    """The outcome of one sent payload."""

    __test__ = False

    test_set: str
    test_case: str
    payload: str = ""
    encoder: str = ""
    placeholder: str = ""
    response_status_code: int = 0
    additional_info: list[str] = field(default_factory=list)
    test_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "test_set": self.test_set,
            "test_case": self.test_case,
            "payload": self.payload,
            "encoder": self.encoder,
            "placeholder": self.placeholder,
            "response_status_code": self.response_status_code,
            "additional_info": list(self.additional_info),
            "type": self.test_type,
        }


@dataclass
class FailedRecord:
    """A payload that could not be sent, with the reasons."""

    payload: str
    test_set: str
    test_case: str
    encoder: str = ""
    placeholder: str = ""
    reason: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "payload": self.payload,
            "test_set": self.test_set,
            "test_case": self.test_case,
            "encoder": self.encoder,
            "placeholder": self.placeholder,
            "reason": list(self.reason),
        }


@dataclass
class NegativeStats:
    """Statistics of malicious (true-negative) requests."""

    summary_table: list[SummaryRow] = field(default_factory=list)
    blocked: list[TestRecord] = field(default_factory=list)
    bypasses: list[TestRecord] = field(default_factory=list)
    unresolved: list[TestRecord] = field(default_factory=list)
    failed: list[FailedRecord] = field(default_factory=list)

    all_requests_number: int = 0
    blocked_requests_number: int = 0
    bypassed_requests_number: int = 0
    unresolved_requests_number: int = 0
    failed_requests_number: int = 0
    resolved_requests_number: int = 0

    unresolved_requests_percentage: float = 0.0
    resolved_blocked_requests_percentage: float = 0.0
    resolved_bypassed_requests_percentage: float = 0.0
    failed_requests_percentage: float = 0.0


@dataclass
class PositiveStats:
    """Statistics of benign (true-positive) requests."""

    summary_table: list[SummaryRow] = field(default_factory=list)
    true_positive: list[TestRecord] = field(default_factory=list)
    false_positive: list[TestRecord] = field(default_factory=list)
    unresolved: list[TestRecord] = field(default_factory=list)
    failed: list[FailedRecord] = field(default_factory=list)

    all_requests_number: int = 0
    blocked_requests_number: int = 0
    bypassed_requests_number: int = 0
    unresolved_requests_number: int = 0
    failed_requests_number: int = 0
    resolved_requests_number: int = 0

    unresolved_requests_percentage: float = 0.0
    resolved_false_requests_percentage: float = 0.0
    resolved_true_requests_percentage: float = 0.0
    failed_requests_percentage: float = 0.0


@dataclass
class ScoreGroup:
    """Scores of one category; -1.0 means not available."""

    true_negative: float = -1.0
    true_positive: float = -1.0
    average: float = -1.0


@dataclass
class Score:
    """Scores of the API and application categories and their average."""

    api_sec: ScoreGroup = field(default_factory=ScoreGroup)
    app_sec: ScoreGroup = field(default_factory=ScoreGroup)
    average: float = -1.0


@dataclass
class Statistics:
    """Everything the scan collected that a report is built from."""

    negative_tests: NegativeStats = field(default_factory=NegativeStats)
    positive_tests: PositiveStats = field(default_factory=PositiveStats)
    score: Score = field(default_factory=Score)
    test_cases_fingerprint: str = ""
    is_grpc_available: bool = False
    paths: dict[str, Any] = field(default_factory=dict)
    waf_score: float = 0.0


def _details_by_status(m: Mapping[int, TestDetails]) -> dict[str, Any]:
    return {str(code): details.to_dict() for code, details in m.items()}


def _details_by_payload(m: Mapping[str, Mapping[int, TestDetails]]) -> dict[str, Any]:
    return {payload: _details_by_status(codes) for payload, codes in m.items()}


@dataclass
class _NegativeSection:
    summary_table: dict[str, TestSetSummary] = field(default_factory=dict)
    # paths -> payload -> status code -> details
    bypassed: dict[str, dict[str, dict[int, TestDetails]]] = field(default_factory=dict)
    # payload -> status code -> details
    unresolved: dict[str, dict[int, TestDetails]] = field(default_factory=dict)
    failed: list[FailedRecord] = field(default_factory=list)

    percentage: float = 0.0
    total_sent: int = 0
    blocked_requests_number: int = 0
    bypassed_requests_number: int = 0
    unresolved_requests_number: int = 0
    failed_requests_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary_table": {k: v.to_dict() for k, v in self.summary_table.items()},
            "bypassed": {
                paths: _details_by_payload(payloads)
                for paths, payloads in self.bypassed.items()
            },
            "unresolved": _details_by_payload(self.unresolved),
            "failed": [f.to_dict() for f in self.failed],
            "percentage": self.percentage,
            "total_sent": self.total_sent,
            "blocked_requests_number": self.blocked_requests_number,
            "bypassed_requests_number": self.bypassed_requests_number,
            "unresolved_requests_number": self.unresolved_requests_number,
            "failed_requests_number": self.failed_requests_number,
        }


@dataclass
class _PositiveSection:
    summary_table: dict[str, TestSetSummary] = field(default_factory=dict)
    # payload -> status code -> details
    blocked: dict[str, dict[int, TestDetails]] = field(default_factory=dict)
    bypassed: dict[str, dict[int, TestDetails]] = field(default_factory=dict)
    unresolved: dict[str, dict[int, TestDetails]] = field(default_factory=dict)
    failed: list[FailedRecord] = field(default_factory=list)

    percentage: float = 0.0
    total_sent: int = 0
    blocked_requests_number: int = 0
    bypassed_requests_number: int = 0
    unresolved_requests_number: int = 0
    failed_requests_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary_table": {k: v.to_dict() for k, v in self.summary_table.items()},
            "blocked": _details_by_payload(self.blocked),
            "bypassed": _details_by_payload(self.bypassed),
            "unresolved": _details_by_payload(self.unresolved),
            "failed": [f.to_dict() for f in self.failed],
            "percentage": self.percentage,
            "total_sent": self.total_sent,
            "blocked_requests_number": self.blocked_requests_number,
            "bypassed_requests_number": self.bypassed_requests_number,
            "unresolved_requests_number": self.unresolved_requests_number,
            "failed_requests_number": self.failed_requests_number,
        }


@dataclass
class HtmlReport:
    """Data required to render a full report in HTML or PDF."""

    ignore_unresolved: bool = False

    waf_name: str = ""
    url: str = ""
    waf_testing_date: str = ""
    gtw_version: str = VERSION
    test_cases_fp: str = ""
    openapi_file: str = ""
    args: str = ""

    api_sec_chart_data: ChartData = field(default_factory=ChartData)
    app_sec_chart_data: ChartData = field(default_factory=ChartData)

    overall: Grade = field(default_factory=Grade)
    api_sec: SecurityGrades = field(default_factory=SecurityGrades)
    app_sec: SecurityGrades = field(default_factory=SecurityGrades)

    comparison_table: list[ComparisonTableRow] = field(default_factory=list)

    total_sent: int = 0
    blocked_requests_number: int = 0
    bypassed_requests_number: int = 0
    unresolved_requests_number: int = 0
    failed_requests_number: int = 0

    scanned_paths: dict[str, Any] = field(default_factory=dict)

    negative_tests: _NegativeSection = field(default_factory=_NegativeSection)
    positive_tests: _PositiveSection = field(default_factory=_PositiveSection)

    def to_dict(self) -> dict[str, Any]:
        """Return the report as JSON-ready data with the wire field names."""
        return {
            "ignore_unresolved": self.ignore_unresolved,
            "waf_name": self.waf_name,
            "url": self.url,
            "waf_testing_date": self.waf_testing_date,
            "gtw_version": self.gtw_version,
            "test_cases_fp": self.test_cases_fp,
            "open_api_file": self.openapi_file,
            "args": self.args,
            "api_sec_chart_data": self.api_sec_chart_data.to_dict(),
            "app_sec_chart_data": self.app_sec_chart_data.to_dict(),
            "overall": self.overall.to_dict(),
            "api_sec": self.api_sec.to_dict(),
            "app_sec": self.app_sec.to_dict(),
            "comparison_table": [row.to_dict() for row in self.comparison_table],
            "total_sent": self.total_sent,
            "blocked_requests_number": self.blocked_requests_number,
            "bypassed_requests_number": self.bypassed_requests_number,
            "unresolved_requests_number": self.unresolved_requests_number,
            "failed_requests_number": self.failed_requests_number,
            "scanned_paths": self.scanned_paths,
            "negative_tests": self.negative_tests.to_dict(),
            "positive_tests": self.positive_tests.to_dict(),
        }