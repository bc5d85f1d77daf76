"""Identification of the WAF in front of a target."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

import requests

from .detectors import DETECTORS

XSS_PAYLOAD = '<script>alert("XSS");</script>'
SQLI_PAYLOAD = "UNION SELECT ALL FROM information_schema AND ' or SLEEP(5) or '"
LFI_PAYLOAD = "../../../../etc/passwd"
RCE_PAYLOAD = "/bin/cat /etc/passwd; ping 127.0.0.1; curl google.com"
XXE_PAYLOAD = '<!ENTITY xxe SYSTEM "file:///etc/shadow">]><pwn>&hack;</pwn>'


def get_target_url(url: str) -> str:
    """Strip path, query and fragment, keeping scheme and host."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "", "", ""))


class WAFDetector:
    """Sends a malicious request and matches the reply against known WAFs."""

    def __init__(self, url: str, tls_verify: bool = False, proxy: str = "") -> None:
        self._session = requests.Session()
        self._session.verify = tls_verify
        if proxy:
            parsed = urlsplit(proxy)
            if not parsed.scheme:
                raise ValueError("couldn't parse proxy URL")
            self._session.proxies = {"http": proxy, "https": proxy}
        self.target = get_target_url(url)

    def _do_request(self) -> requests.Response:
        params = [
            ("a", XSS_PAYLOAD),
            ("b", SQLI_PAYLOAD),
            ("c", LFI_PAYLOAD),
            ("d", RCE_PAYLOAD),
            ("e", XXE_PAYLOAD),
        ]
        return self._session.get(self.target, params=params, allow_redirects=False)

    def detect_waf(self) -> tuple[str, str]:
        """Return (name, vendor) of the first matching WAF, or empty strings."""
        try:
            response = self._do_request()
        except requests.RequestException as exc:
            raise ConnectionError("couldn't identify WAF") from exc

        with response:
            for detector in DETECTORS:
                if detector.is_waf(response):
                    return detector.waf_name, detector.vendor
        return "", ""