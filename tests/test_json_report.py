import json
import math
from datetime import datetime

import pytest

from wafprobe.json_report import build_full_json_report, write_full_json_report
from wafprobe.models import (
    FailedRecord,
    NegativeStats,
    PositiveStats,
    Score,
    Statistics,
    SummaryRow,
    TestRecord,
)

REPORT_TIME = datetime(2023, 1, 2, 3, 4, 5)


def make_stats():
    neg = NegativeStats(
        summary_table=[
            SummaryRow("sqli", "b-case", 50.0, 4, 2, 2, 0, 0),
            SummaryRow("sqli", "a-case", 100.0, 2, 2, 0, 0, 0),
            SummaryRow("api", "rest", 0.0, 1, 0, 1, 0, 0),
        ],
        bypasses=[
            TestRecord(
                "sqli", "b-case", payload="' or 1=1", encoder="URL",
                placeholder="URLParam", response_status_code=200,
                additional_info=["GET /a"],
            )
        ],
        unresolved=[
            TestRecord(
                "sqli", "b-case", payload="x", encoder="Plain",
                placeholder="Header", response_status_code=500,
            )
        ],
        failed=[FailedRecord("y", "sqli", "b-case", "Base64", "JSONBody", ["timeout"])],
        all_requests_number=7,
        blocked_requests_number=4,
        bypassed_requests_number=3,
        resolved_requests_number=7,
        resolved_blocked_requests_percentage=57.14,
    )
    pos = PositiveStats(
        summary_table=[SummaryRow("fp", "texts", 90.0, 10, 1, 9, 0, 0)],
        false_positive=[
            TestRecord(
                "fp", "texts", payload="<hello>", encoder="Plain",
                placeholder="URLPath", response_status_code=403,
            )
        ],
        all_requests_number=10,
        blocked_requests_number=1,
        bypassed_requests_number=9,
        resolved_requests_number=10,
        resolved_true_requests_percentage=90.0,
    )
    return Statistics(
        negative_tests=neg,
        positive_tests=pos,
        score=Score(average=73.5),
        test_cases_fingerprint="f" * 32,
    )


def build(stats=None, ignore_unresolved=False):
    return build_full_json_report(
        stats or make_stats(), REPORT_TIME, "waf", "http://localhost/", "--x", ignore_unresolved
    )


def test_header_fields_and_order():
    report = build()
    assert report["date"] == "Mon Jan  2 03:04:05 2023"
    assert report["project_name"] == "waf"
    assert report["fp"] == "f" * 32
    assert report["score"] == 73.5
    assert list(report)[:6] == ["date", "project_name", "url", "score", "fp", "args"]


def test_score_omitted_when_zero():
    stats = make_stats()
    stats.score.average = 0.0
    assert "score" not in build(stats)


def test_summary_test_sets_are_sorted():
    sets = build()["summary"]["negative"]["test_sets"]
    assert list(sets) == ["api", "sqli"]
    assert list(sets["sqli"]) == ["a-case", "b-case"]
    assert sets["sqli"]["b-case"] == {
        "percentage": 50.0, "sent": 4, "blocked": 2,
        "bypassed": 2, "unresolved": 0, "failed": 0,
    }


def test_summary_counts():
    negative = build()["summary"]["negative"]
    assert negative["total_sent"] == 7
    assert negative["score"] == 57.14
    assert negative["resolved_tests"] == 7
    assert build()["summary"]["positive"]["score"] == 90.0


def test_empty_statistics():
    report = build(Statistics())
    assert report["summary"] == {}
    assert report["negative_payloads"] == {}
    assert report["positive_payloads"] == {}


def test_bypass_details_placeholder_mirrors_encoder():
    bypassed = build()["negative_payloads"]["bypassed"]
    assert len(bypassed) == 1
    assert bypassed[0]["placeholder"] == "URL"
    assert bypassed[0]["status"] == 200
    assert bypassed[0]["additional_info"] == ["GET /a"]


def test_ignore_unresolved_drops_unresolved():
    assert "unresolved" not in build(ignore_unresolved=True)["negative_payloads"]
    unresolved = build(ignore_unresolved=False)["negative_payloads"]["unresolved"]
    assert unresolved[0]["status"] == 500
    assert "additional_info" not in unresolved[0]


def test_failed_details():
    failed = build()["negative_payloads"]["failed"][0]
    assert failed["reason"] == ["timeout"]
    assert "status" not in failed
    assert failed["placeholder"] == failed["encoder"]


def test_positive_payloads():
    payloads = build()["positive_payloads"]
    assert payloads["blocked"][0]["status"] == 403
    assert "bypassed" not in payloads


def test_write_round_trip(tmp_path):
    path = tmp_path / "report.json"
    write_full_json_report(make_stats(), path, REPORT_TIME, "waf", "http://localhost/", "--x", False)
    assert json.loads(path.read_text(encoding="utf-8")) == build()


def test_written_file_escapes_html_and_uses_indent(tmp_path):
    path = tmp_path / "report.json"
    write_full_json_report(make_stats(), path, REPORT_TIME, "waf", "http://localhost/", "--x", False)
    text = path.read_text(encoding="utf-8")
    assert "\\u003chello\\u003e" in text
    assert "<hello>" not in text
    assert text.splitlines()[1].startswith('    "date"')
    assert '"percentage": 50.0' not in text


def test_nan_cannot_be_written(tmp_path):
    stats = make_stats()
    stats.negative_tests.summary_table[0].percentage = math.nan
    with pytest.raises(ValueError, match="couldn't dump report to JSON"):
        write_full_json_report(stats, tmp_path / "r.json", REPORT_TIME, "waf", "u", "", False)