"""Letter grades for scores and checks of report field formats."""

from __future__ import annotations

import re

from .models import NA_MARK, ComparisonTableRow, Grade

_GRADE_STEPS = (
    (97.0, "A+", "a"),
    (93.0, "A", "a"),
    (90.0, "A-", "a"),
    (87.0, "B+", "b"),
    (83.0, "B", "b"),
    (80.0, "B-", "b"),
    (77.0, "C+", "c"),
    (73.0, "C", "c"),
    (70.0, "C-", "c"),
    (67.0, "D+", "d"),
    (63.0, "D", "d"),
    (60.0, "D-", "d"),
)

_GTW_VERSION_RE = re.compile(r"(v\d+\.\d+\.\d+(\-\d+\-g[a-f0-9]{7})?|unknown)")
_FP_RE = re.compile(r"[a-f0-9]{32}")
_MARK_RE = re.compile(r"(N/A|[A-F][\+\-]?)")
_SUFFIX_RE = re.compile(r"(na|[a-f])")


def compute_grade(value: float, total: int) -> Grade:
    """Grade value/total; fractions up to 1 are taken as shares of 100 %."""
    if total == 0:
        return Grade(0.0, NA_MARK, "na")

    percentage = value / total
    if percentage <= 1:
        percentage *= 100

    for threshold, mark, suffix in _GRADE_STEPS:
        if percentage >= threshold:
            return Grade(percentage, mark, suffix)
    return Grade(percentage, "F", "f")


def validate_gtw_version(value: str) -> bool:
    return _GTW_VERSION_RE.search(value) is not None


def validate_fp(value: str) -> bool:
    return _FP_RE.search(value) is not None


def validate_mark(value: str) -> bool:
    return _MARK_RE.search(value) is not None


def validate_css_suffix(value: str) -> bool:
    return _SUFFIX_RE.search(value) is not None


COMPARISON_TABLE: list[ComparisonTableRow] = [
    ComparisonTableRow(
        "ModSecurity PARANOIA=1",
        compute_grade(42.9, 1),
        compute_grade(30.5, 1),
        compute_grade(36.7, 1),
    ),
    ComparisonTableRow(
        "ModSecurity PARANOIA=2",
        compute_grade(78.6, 1),
        compute_grade(34.8, 1),
        compute_grade(56.7, 1),
    ),
    ComparisonTableRow(
        "ModSecurity PARANOIA=3",
        compute_grade(92.9, 1),
        compute_grade(38.3, 1),
        compute_grade(65.6, 1),
    ),
    ComparisonTableRow(
        "ModSecurity PARANOIA=4",
        compute_grade(100, 1),
        compute_grade(40.8, 1),
        compute_grade(70.4, 1),
    ),
]