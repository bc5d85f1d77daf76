"""Console summary report as text tables or JSON."""

from __future__ import annotations

import re
import textwrap
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime

from .json_report import _dumps, _report_head, _tests_info
from .models import NegativeStats, PositiveStats, ScoreGroup, Statistics, SummaryRow

TEXT_FORMAT = "text"
JSON_FORMAT = "json"

COL_MIN_WIDTH = 21
_SUMMARY_COL_MIN_WIDTH = 27
_MAX_COL_WIDTH = 30

_DECIMAL_RE = re.compile(r"^-?(?:\d{1,3}(?:,\d{3})*|\d+)(?:\.\d+)?$")


def _num_or_space(ch: str) -> bool:
    return "0" <= ch <= "9" or ch == " "


def _title(text: str) -> str:
    """Header and footer formatting: dots and underscores become spaces, upper case."""
    chars = list(text)
    last = len(chars) - 1
    for i, ch in enumerate(chars):
        if ch == "_":
            chars[i] = " "
        elif ch == ".":
            if (i != 0 and not _num_or_space(chars[i - 1])) or (
                i != last and not _num_or_space(chars[i + 1])
            ):
                chars[i] = " "
    result = "".join(chars).strip()
    if not result and text:
        result = " "
    return result.upper()


def _cell_lines(text: str) -> list[str]:
    lines: list[str] = []
    for line in text.split("\n"):
        if len(line) > _MAX_COL_WIDTH:
            wrapped = textwrap.wrap(
                line, _MAX_COL_WIDTH, break_long_words=False, break_on_hyphens=False
            )
            lines.extend(wrapped or [line])
        else:
            lines.append(line)
    return lines


def _pad_center(text: str, width: int) -> str:
    gap = width - len(text)
    if gap <= 0:
        return text
    left = gap // 2
    return " " * left + text + " " * (gap - left)


class _Table:
    """A bordered text table with a header, rows and a footer."""

    def __init__(self, header: Sequence[str], min_width: int) -> None:
        self._header = [_cell_lines(_title(h)) for h in header]
        self._min_width = min_width
        self._rows: list[tuple[list[list[str]], list[bool]]] = []
        self._footer: list[list[str]] = []

    def append(self, row: Sequence[str]) -> None:
        right = [bool(_DECIMAL_RE.match(cell.strip())) for cell in row]
        self._rows.append(([_cell_lines(cell) for cell in row], right))

    def set_footer(self, footer: Sequence[str]) -> None:
        self._footer = [_cell_lines(_title(f)) for f in footer]

    def _widths(self) -> list[int]:
        widths = [self._min_width] * len(self._header)
        groups = [self._header, self._footer, *(cells for cells, _ in self._rows)]
        for cells in groups:
            for i, lines in enumerate(cells):
                widths[i] = max(widths[i], *(len(line) for line in lines))
        return widths

    @staticmethod
    def _lines(cells: list[list[str]], widths: list[int], align) -> Iterator[str]:
        height = max((len(lines) for lines in cells), default=0)
        for n in range(height):
            parts = [
                align(i, lines[n] if n < len(lines) else "", widths[i])
                for i, lines in enumerate(cells)
            ]
            yield "| " + " | ".join(parts) + " |"

    def render(self) -> str:
        widths = self._widths()
        border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
        center = lambda _i, text, width: _pad_center(text, width)  # noqa: E731

        out = [border, *self._lines(self._header, widths, center), border]
        for cells, right in self._rows:
            def align(i, text, width, right=right):
                return text.rjust(width) if right[i] else text.ljust(width)

            out.extend(self._lines(cells, widths, align))
        out.append(border)
        if self._footer:
            out.extend(self._lines(self._footer, widths, center))
            out.append(border)
        return "\n".join(out) + "\n"


def _base_header(ignore_unresolved: bool) -> list[str]:
    header = ["Test set", "Test case", "Percentage, %", "Blocked", "Bypassed"]
    if not ignore_unresolved:
        header.append("Unresolved")
    return header + ["Sent", "Failed"]


def _row_cells(rows: Iterable[SummaryRow], ignore_unresolved: bool) -> Iterator[list[str]]:
    for row in rows:
        cells = [
            row.test_set,
            row.test_case,
            f"{row.percentage:.2f}",
            str(row.blocked),
            str(row.bypassed),
        ]
        if not ignore_unresolved:
            cells.append(str(row.unresolved))
        cells += [str(row.sent), str(row.failed)]
        yield cells


def _tail_footer(tests: NegativeStats | PositiveStats, ignore_unresolved: bool) -> list[str]:
    footer = []
    if not ignore_unresolved:
        footer.append(
            f"Unresolved (Sent):\n{tests.unresolved_requests_number}/"
            f"{tests.all_requests_number} ({tests.unresolved_requests_percentage:.2f}%)"
        )
    footer.append(f"Total Sent:\n{tests.all_requests_number}")
    footer.append(
        f"Failed (Total):\n{tests.failed_requests_number}/"
        f"{tests.all_requests_number} ({tests.failed_requests_percentage:.2f}%)"
    )
    return footer


def _tests_table(
    rows: Iterable[SummaryRow], footer: list[str], ignore_unresolved: bool
) -> str:
    table = _Table(_base_header(ignore_unresolved), COL_MIN_WIDTH)
    for cells in _row_cells(rows, ignore_unresolved):
        table.append(cells)
    table.set_footer(footer)
    return table.render()


def _score_cell(value: float) -> str:
    return "n/a" if value == -1.0 else f"{value:.2f}%"


def _score_row(name: str, group: ScoreGroup) -> list[str]:
    return [
        name,
        _score_cell(group.true_negative),
        _score_cell(group.true_positive),
        _score_cell(group.average),
    ]


def format_console_table(
    stats: Statistics, report_time: datetime, waf_name: str, ignore_unresolved: bool
) -> str:
    """Render the negative, positive and summary tables as text."""
    date = report_time.strftime("%Y-%m-%d")
    neg = stats.negative_tests
    pos = stats.positive_tests

    neg_footer = [
        f"Date:\n{date}",
        f"Project Name:\n{waf_name}",
        f"True Negative Score:\n{neg.resolved_blocked_requests_percentage:.2f}%",
        f"Blocked (Resolved):\n{neg.blocked_requests_number}/"
        f"{neg.resolved_requests_number} ({neg.resolved_blocked_requests_percentage:.2f}%)",
        f"Bypassed (Resolved):\n{neg.bypassed_requests_number}/"
        f"{neg.resolved_requests_number} ({neg.resolved_bypassed_requests_percentage:.2f}%)",
        *_tail_footer(neg, ignore_unresolved),
    ]
    pos_footer = [
        f"Date:\n{date}",
        f"Project Name:\n{waf_name}",
        f"False Positive Score:\n{pos.resolved_true_requests_percentage:.2f}%",
        f"Blocked (Resolved):\n{pos.blocked_requests_number}/"
        f"{pos.resolved_requests_number} ({pos.resolved_false_requests_percentage:.2f}%)",
        f"Bypassed (Resolved):\n{pos.bypassed_requests_number}/"
        f"{pos.resolved_requests_number} ({pos.resolved_true_requests_percentage:.2f}%)",
        *_tail_footer(pos, ignore_unresolved),
    ]

    summary = _Table(
        ["Type", "True-negative tests blocked", "True-positive tests passed", "Average"],
        _SUMMARY_COL_MIN_WIDTH,
    )
    summary.append(_score_row("API Security", stats.score.api_sec))
    summary.append(_score_row("Application Security", stats.score.app_sec))
    summary.set_footer(["", "", "Score", _score_cell(stats.score.average)])

    return (
        "Negative Tests:\n"
        + _tests_table(neg.summary_table, neg_footer, ignore_unresolved)
        + "\nPositive Tests:\n"
        + _tests_table(pos.summary_table, pos_footer, ignore_unresolved)
        + "\nSummary:\n"
        + summary.render()
    )


def build_console_json(
    stats: Statistics, report_time: datetime, waf_name: str, url: str, args: str
) -> str:
    """Render the console report as indented JSON text."""
    report = _report_head(stats, report_time, waf_name, url, args)
    neg = stats.negative_tests
    pos = stats.positive_tests

    negative = _tests_info(neg.resolved_blocked_requests_percentage, neg)
    if negative is not None:
        report["negative"] = negative
    positive = _tests_info(pos.resolved_true_requests_percentage, pos)
    if positive is not None:
        report["positive"] = positive

    return _dumps(report, "couldn't export report to JSON")


def render_console_report(
    stats: Statistics,
    report_time: datetime,
    waf_name: str,
    url: str,
    args: str,
    ignore_unresolved: bool,
    fmt: str,
) -> None:
    """Print the console report in the chosen format ('text' or 'json')."""
    if fmt == TEXT_FORMAT:
        print(format_console_table(stats, report_time, waf_name, ignore_unresolved))
    elif fmt == JSON_FORMAT:
        print(build_console_json(stats, report_time, waf_name, url, args))
    else:
        raise ValueError(f"unknown report format: {fmt}")