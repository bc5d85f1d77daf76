# wafprobe

A library for assessing a web application firewall (WAF). It expands test
cases into the individual requests to send, classifies responses as blocked or
passed, recognises a few well-known WAF products, and turns collected scan
statistics into console, JSON, HTML and PDF reports.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `wafprobe.models`: the data the reports are built from: `Statistics`
  (with `NegativeStats`, `PositiveStats` and `Score`/`ScoreGroup`),
  `SummaryRow`, `TestRecord`, `FailedRecord`, and the report data
  `HtmlReport`, `Grade`, `SecurityGrades`, `ChartData`, `TestDetails`,
  `TestSetSummary`, `ComparisonTableRow`. `HtmlReport.to_dict()` gives
  JSON-ready data. `map_keys_to_string(m, sep)` joins mapping keys.
- `wafprobe.grading`: `compute_grade(value, total)` turns a ratio into a
  `Grade` with a letter mark (`A+` to `F`, or `N/A` when `total` is 0).
  `validate_gtw_version`, `validate_fp`, `validate_mark` and
  `validate_css_suffix` check the format of report fields. `COMPARISON_TABLE`
  holds reference grades for ModSecurity at paranoia levels 1 to 4.
- `wafprobe.charts`: `generate_chart_data(stats)` returns radar chart labels
  and block percentages for the API and application security categories;
  `is_api_test`, `update_counters` and `get_indicators_and_items` are the
  steps it uses.
- `wafprobe.html_report`: `prepare_html_full_report(...)` builds the
  `HtmlReport` that an HTML template is filled with: grades, chart data,
  per-test-set summaries and bypassed/blocked/unresolved payloads grouped by
  payload and status code.
- `wafprobe.json_report`: `build_full_json_report(...)` returns the full
  report as a dict; `write_full_json_report(...)` writes it to a file.
- `wafprobe.console`: `format_console_table(...)` renders the negative,
  positive and summary tables as text; `build_console_json(...)` renders the
  same summary as JSON; `render_console_report(..., fmt)` prints one of them
  (`"text"` or `"json"`, anything else raises `ValueError`).
- `wafprobe.export`: `export_full_report(...)` saves the report as `json`,
  `html` or `pdf` (`ReportFormat`), or does nothing for `none`, and returns
  the written file name. `find_chrome()` locates Chrome/Chromium and
  `render_to_pdf(...)` prints an HTML file to PDF with it in headless mode.
  `send_email(report, email, server_url)` posts an `HtmlReport` to a report
  server and raises `ErrorResponse` with the server's message on failure.
- `wafprobe.detectors`: `Detector` and the check builders `check_status_code`,
  `check_header`, `check_cookie`, `check_content`, with fingerprints for
  Akamai Kona SiteDefender (`kona_site_defender()`), Imperva Incapsula
  (`incapsula()`) and Imperva SecureSphere (`secure_sphere()`).
- `wafprobe.detector`: `WAFDetector(url, tls_verify, proxy)` sends one GET
  request carrying XSS, SQLi, LFI, RCE and XXE payloads and `detect_waf()`
  returns `(name, vendor)` of the first matching product, or `("", "")`.
  `get_target_url(url)` keeps only the scheme and host.
- `wafprobe.scanning`: `TestCase` and `TestWork`; `produce_tests(cases,
  enable_debug_header)` yields every payload x encoder x placeholder
  combination, optionally tagged with a SHA-256 value from
  `debug_header_value(...)` meant for the `X-GoTestWAF-Test` header.
  `check_blocking(...)` and `check_pass(...)` classify a response by regular
  expression or status code. `grpc_code_to_http_status(code)` and
  `tls_and_host_from_url(url, port)` help with gRPC targets.

## Example

```python
from datetime import datetime

from wafprobe.console import render_console_report
from wafprobe.grading import compute_grade
from wafprobe.models import Statistics
from wafprobe.scanning import TestCase, check_blocking, produce_tests

print(compute_grade(45, 50).mark)   # A-

case = TestCase("community", "xss", payloads=["<script>"],
                encoders=["Plain", "URL"], placeholders=["URLParam"])
for work in produce_tests([case], enable_debug_header=True):
    print(work.encoder, work.placeholder, work.debug_header_value)

print(check_blocking("", 403, "", [403]))   # True

render_console_report(Statistics(), datetime.now(), "my-waf",
                      "http://localhost:8080/", "", False, "text")
```

Identifying a WAF in front of a site:

```python
from wafprobe.detector import WAFDetector

name, vendor = WAFDetector("http://localhost:8080/").detect_waf()
```

## What the package does not do

- It does not send the test requests itself: there is no scan loop, no
  payload encoders or placeholders, and no gRPC or WebSocket client. Callers
  send the requests produced by `produce_tests` and fill in `Statistics`.
- It does not compute the statistics (percentages, scores, summary rows);
  `Statistics` is taken as given by every report function.
- It ships no HTML template or chart renderer. For the `html` and `pdf`
  formats, `export_full_report` needs a `render_html` callable that turns an
  `HtmlReport` into HTML text, and raises `ValueError` without one.
- It has no command-line program.