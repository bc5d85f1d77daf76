"""Fingerprints that recognise known WAF products from a response."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

import requests

Check = Callable[[requests.Response], bool]


def _header_values(response: requests.Response, header: str) -> list[str]:
    raw_headers = getattr(getattr(response, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        values = raw_headers.getlist(header)
        if values:
            return list(values)
    value = response.headers.get(header)
    return [] if value is None else [value]


def check_status_code(status: int) -> Check:
    """Match the response status code against a value."""

    def check(response: requests.Response) -> bool:
        return response.status_code == status

    return check


def check_header(header: str, regex: str) -> Check:
    """Match any value of a header against a regular expression."""
    pattern = re.compile(regex)

    def check(response: requests.Response) -> bool:
        return any(pattern.search(v) for v in _header_values(response, header))

    return check


def check_cookie(regex: str) -> Check:
    """Match Set-Cookie values against a regular expression."""
    return check_header("Set-Cookie", regex)


def check_content(regex: str) -> Check:
    """Match the response body against a regular expression."""
    pattern = re.compile(regex)

    def check(response: requests.Response) -> bool:
        try:
            body = response.text
        except (requests.RequestException, RuntimeError):
            return False
        return pattern.search(body) is not None

    return check


@dataclass
class Detector:
    """A WAF product with the checks that recognise it."""

    waf_name: str
    vendor: str
    checks: list[Check] = field(default_factory=list)

    def is_waf(self, response: requests.Response) -> bool:
        """Tell whether any check matches the response."""
        return any(check(response) for check in self.checks)


def kona_site_defender() -> Detector:
    return Detector(
        "Kona SiteDefender",
        "Akamai",
        [check_header("Server", "AkamaiGHost")],
    )


def secure_sphere() -> Detector:
    return Detector(
        "SecureSphere",
        "Imperva Inc.",
        [
            check_content("<(title|h2)>Error"),
            check_content("The incident ID is"),
            check_content("This page can't be displayed"),
            check_content("Contact support for additional information"),
        ],
    )


def incapsula() -> Detector:
    return Detector(
        "Incapsula",
        "Imperva Inc.",
        [
            check_cookie("^incap_ses.*?="),
            check_cookie("^visid_incap.*?="),
            check_content("incapsula incident id"),
            check_content("powered by incapsula"),
            check_content("/_Incapsula_Resource"),
        ],
    )


# Checked in this order; the first match wins.
DETECTORS: list[Detector] = [kona_site_defender(), incapsula(), secure_sphere()]