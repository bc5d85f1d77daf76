"""Saving full reports to disk and sending them by e-mail."""

from __future__ import annotations

import enum
import json
import os
import platform
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import requests

from .html_report import prepare_html_full_report
from .json_report import write_full_json_report
from .models import HtmlReport, Statistics

SERVER_URL = "https://gotestwaf.wallarm.tools/v1/send-report"

# 255 (max length) - 5 (".html") - 1 (to be sure)
MAX_REPORT_FILENAME_LENGTH = 249

_WINDOWS_CHROME = "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe"
_DARWIN_CHROME = "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
_LINUX_CHROME_NAMES = ("chromium-browser", "google-chrome-stable")

_ERROR_STATUSES = frozenset({400, 413, 429, 500})

HtmlRenderer = Callable[[HtmlReport], str]


class ReportFormat(str, enum.Enum):
    """Formats a full report can be exported in."""

    JSON = "json"
    HTML = "html"
    PDF = "pdf"
    NONE = "none"


class ErrorResponse(Exception):
    """An error message returned by the report server."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return self.msg


def find_chrome() -> str:
    """Return the path of a Chrome or Chromium executable."""
    system = platform.system()
    chrome_path = ""
    if system == "Windows":
        chrome_path = _WINDOWS_CHROME
    elif system == "Darwin":
        chrome_path = _DARWIN_CHROME
    elif system == "Linux":
        for name in _LINUX_CHROME_NAMES:
            found = shutil.which(name)
            if found:
                chrome_path = found
                break

    if not chrome_path:
        raise FileNotFoundError("chrome not found")
    if not os.path.exists(chrome_path):
        raise FileNotFoundError(chrome_path)
    return chrome_path


def render_to_pdf(file_to_render: str | Path, result_pdf: str | Path) -> None:
    """Print an HTML file to PDF with headless Chrome."""
    try:
        chrome_path = find_chrome()
    except FileNotFoundError as exc:
        raise FileNotFoundError(
            "couldn't find Chrome/Chromium to render HTML file to PDF"
        ) from exc

    subprocess.run(
        [
            chrome_path,
            "--headless",
            "--disable-gpu",
            "--run-all-compositor-stages-before-draw",
            "--no-sandbox",
            "--print-to-pdf-no-header",
            f"--print-to-pdf={result_pdf}",
            str(file_to_render),
        ],
        check=True,
    )


def send_email(report: HtmlReport, email: str, server_url: str = SERVER_URL) -> None:
    """Post the report data to the report server for delivery by e-mail."""
    try:
        data = json.dumps(report.to_dict(), allow_nan=False)
    except ValueError as exc:
        raise ValueError("couldn't marshal report data into JSON format") from exc

    try:
        resp = requests.post(server_url, params={"email": email}, data=data.encode("utf-8"))
    except requests.RequestException as exc:
        raise ConnectionError("couldn't send request to server") from exc

    with resp:
        if resp.status_code == 200:
            return
        if resp.status_code in _ERROR_STATUSES:
            try:
                body = json.loads(resp.content)
            except ValueError as exc:
                raise ValueError("couldn't parse error message from server") from exc
            msg = body.get("msg", "") if isinstance(body, dict) else ""
            raise ErrorResponse(msg if isinstance(msg, str) else str(msg))
        raise RuntimeError(f"bad status code: {resp.status_code}")


def _export_html_to_temp(report: HtmlReport, render_html: HtmlRenderer) -> str:
    try:
        html = render_html(report)
    except Exception as exc:
        raise RuntimeError("couldn't substitute report data into HTML template") from exc

    fd, name = tempfile.mkstemp(prefix="wafprobe_report_", suffix=".html")
    with os.fdopen(fd, "wb") as file:
        file.write(html.encode("utf-8"))
    os.chmod(name, 0o644)
    return name


def export_full_report(
    stats: Statistics,
    report_file: str,
    report_time: datetime,
    waf_name: str,
    url: str,
    openapi_file: str,
    args: str,
    ignore_unresolved: bool,
    fmt: str,
    render_html: HtmlRenderer | None = None,
) -> str:
    """Save the full report; return the written file name, or "" for 'none'."""
    report_file = str(report_file)
    if len(os.path.basename(report_file).encode("utf-8")) > MAX_REPORT_FILENAME_LENGTH:
        raise ValueError("report filename too long")

    try:
        report_format = ReportFormat(fmt)
    except ValueError:
        raise ValueError(f"unknown report format: {fmt}") from None

    if report_format is ReportFormat.NONE:
        return ""

    if report_format is ReportFormat.JSON:
        full_name = report_file + ".json"
        write_full_json_report(
            stats, full_name, report_time, waf_name, url, args, ignore_unresolved
        )
        return full_name

    if render_html is None:
        raise ValueError(f"an HTML renderer is required for the {fmt} format")

    report = prepare_html_full_report(
        stats, report_time, waf_name, url, openapi_file, args, ignore_unresolved
    )
    temp_name = _export_html_to_temp(report, render_html)

    if report_format is ReportFormat.HTML:
        full_name = report_file + ".html"
        try:
            shutil.move(temp_name, full_name)
        except OSError as exc:
            raise OSError("couldn't export report to HTML") from exc
        return full_name

    full_name = report_file + ".pdf"
    try:
        render_to_pdf(temp_name, full_name)
    finally:
        Path(temp_name).unlink(missing_ok=True)
    return full_name