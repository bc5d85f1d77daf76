import json
from datetime import datetime

import pytest

from wafprobe.console import build_console_json, format_console_table, render_console_report
from wafprobe.models import (
    NegativeStats,
    PositiveStats,
    Score,
    ScoreGroup,
    Statistics,
    SummaryRow,
)

REPORT_TIME = datetime(2023, 1, 2, 3, 4, 5)


def make_stats():
    neg = NegativeStats(
        summary_table=[
            SummaryRow("sqli", "basic", 50.0, 4, 2, 2, 0, 0),
            SummaryRow("xss", "a rather long test case name that needs wrapping", 100.0, 2, 2, 0, 0, 0),
        ],
        all_requests_number=6,
        blocked_requests_number=4,
        bypassed_requests_number=2,
        resolved_requests_number=6,
    )
    pos = PositiveStats(
        summary_table=[SummaryRow("fp", "texts", 90.0, 10, 1, 9, 0, 0)],
        all_requests_number=10,
    )
    score = Score(api_sec=ScoreGroup(true_negative=75.0))
    return Statistics(negative_tests=neg, positive_tests=pos, score=score)


def table_blocks(text):
    blocks, current = [], []
    for line in text.splitlines():
        if line.startswith(("+", "|")):
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def test_sections_present():
    out = format_console_table(make_stats(), REPORT_TIME, "waf", False)
    assert out.startswith("Negative Tests:\n")
    assert "\nPositive Tests:\n" in out
    assert "\nSummary:\n" in out
    assert len(table_blocks(out)) == 3


def test_lines_of_each_table_have_equal_width():
    out = format_console_table(make_stats(), REPORT_TIME, "waf", False)
    for block in table_blocks(out):
        assert len({len(line) for line in block}) == 1


def test_columns_respect_minimum_width():
    out = format_console_table(make_stats(), REPORT_TIME, "waf", True)
    for block in table_blocks(out)[:2]:
        segments = block[0].strip("+").split("+")
        assert all(len(seg) >= 23 for seg in segments)


def test_header_is_upper_case():
    out = format_console_table(make_stats(), REPORT_TIME, "waf", False)
    assert "TEST SET" in out
    assert "sqli" in out


def test_ignore_unresolved_removes_a_column():
    with_unresolved = table_blocks(format_console_table(make_stats(), REPORT_TIME, "waf", False))
    without = table_blocks(format_console_table(make_stats(), REPORT_TIME, "waf", True))
    assert with_unresolved[0][1].count("|") == without[0][1].count("|") + 1


def test_summary_scores():
    out = format_console_table(make_stats(), REPORT_TIME, "waf", False)
    assert "75.00%" in out
    assert "n/a" in out
    assert "2023-01-02" in out


def test_render_text_prints_table(capsys):
    stats = make_stats()
    render_console_report(stats, REPORT_TIME, "waf", "http://localhost/", "", False, "text")
    captured = capsys.readouterr().out
    assert captured == format_console_table(stats, REPORT_TIME, "waf", False) + "\n"


def test_render_json_prints_report(capsys):
    render_console_report(make_stats(), REPORT_TIME, "waf", "http://localhost/", "--x", False, "json")
    data = json.loads(capsys.readouterr().out)
    assert data["project_name"] == "waf"
    assert data["args"] == "--x"
    assert "summary" not in data
    assert list(data["negative"]["test_sets"]) == ["sqli", "xss"]
    assert data["negative"]["total_sent"] == 6


def test_console_json_without_rows():
    data = json.loads(build_console_json(Statistics(), REPORT_TIME, "waf", "u", ""))
    assert "negative" not in data
    assert "positive" not in data
    assert data["score"] == -1


def test_unknown_format():
    with pytest.raises(ValueError, match="unknown report format: xml"):
        render_console_report(make_stats(), REPORT_TIME, "waf", "u", "", False, "xml")