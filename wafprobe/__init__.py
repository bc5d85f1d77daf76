"""WAF assessment library: test generation, response classification, WAF detection and reports."""

__version__ = "0.1.0"

__all__ = [
    "models",
    "grading",
    "charts",
    "html_report",
    "json_report",
    "console",
    "export",
    "detectors",
    "detector",
    "scanning",
]