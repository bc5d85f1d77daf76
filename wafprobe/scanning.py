"""Test work generation and response classification used while scanning."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .models import TestRecord

GTW_DEBUG_HEADER = "X-GoTestWAF-Test"
PRE_CHECK_VECTOR = "<script>alert('union select password from users')</script>"

# gRPC status code -> HTTP status code.
_GRPC_TO_HTTP = {
    0: 200,  # OK
    1: 499,  # Canceled
    2: 500,  # Unknown
    3: 400,  # InvalidArgument
    4: 504,  # DeadlineExceeded
    5: 404,  # NotFound
    6: 409,  # AlreadyExists
    7: 403,  # PermissionDenied
    8: 429,  # ResourceExhausted
    9: 400,  # FailedPrecondition
    10: 409,  # Aborted
    11: 400,  # OutOfRange
    12: 501,  # Unimplemented
    13: 500,  # Internal
    14: 503,  # Unavailable
    15: 500,  # DataLoss
    16: 401,  # Unauthenticated
}


@dataclass
class TestCase:
    """A named group of payloads with the encoders and placeholders to try."""

    __test__ = False

    set_name: str
    name: str
    payloads: list[str] = field(default_factory=list)
    encoders: list[str] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)
    test_type: str = ""
    is_true_positive: bool = False


@dataclass
class TestWork:
    """One payload, encoder and placeholder combination to send."""

    __test__ = False

    set_name: str
    case_name: str
    payload: str
    encoder: str
    placeholder: str
    test_type: str = ""
    is_true_positive: bool = False
    debug_header_value: str = ""

    def to_info(self, response_status_code: int) -> TestRecord:
        """Make the record stored for this work's outcome."""
        return TestRecord(
            test_set=self.set_name,
            test_case=self.case_name,
            payload=self.payload,
            encoder=self.encoder,
            placeholder=self.placeholder,
            response_status_code=response_status_code,
            test_type=self.test_type,
        )


def debug_header_value(
    set_name: str, case_name: str, placeholder: str, encoder: str, payload: str
) -> str:
    """Return the hex SHA-256 that identifies one test combination."""
    digest = hashlib.sha256()
    for part in (set_name, case_name, placeholder, encoder, payload):
        digest.update(part.encode("utf-8"))
    return digest.hexdigest()


def produce_tests(
    test_cases: Iterable[TestCase], enable_debug_header: bool
) -> Iterator[TestWork]:
    """Yield every payload x encoder x placeholder combination of each case."""
    for case in test_cases:
        for payload in case.payloads:
            for encoder in case.encoders:
                for placeholder in case.placeholders:
                    header = (
                        debug_header_value(
                            case.set_name, case.name, placeholder, encoder, payload
                        )
                        if enable_debug_header
                        else ""
                    )
                    yield TestWork(
                        set_name=case.set_name,
                        case_name=case.name,
                        payload=payload,
                        encoder=encoder,
                        placeholder=placeholder,
                        test_type=case.test_type,
                        is_true_positive=case.is_true_positive,
                        debug_header_value=header,
                    )


def _regex_matches(regex: str, body: str) -> bool:
    try:
        return re.search(regex, body) is not None
    except re.error:
        return False


def check_blocking(
    body: str, status_code: int, block_regex: str, block_status_codes: Sequence[int]
) -> bool:
    """Tell whether a response means the request was blocked."""
    if block_regex:
        return _regex_matches(block_regex, body)
    return status_code in block_status_codes


def check_pass(
    body: str, status_code: int, pass_regex: str, pass_status_codes: Sequence[int]
) -> bool:
    """Tell whether a response means the request was passed."""
    if pass_regex:
        return _regex_matches(pass_regex, body)
    return status_code in pass_status_codes


def grpc_code_to_http_status(code: int) -> int:
    """Translate a gRPC status code to the matching HTTP status code."""
    return _GRPC_TO_HTTP.get(int(code), 500)


def _split_host_port(hostport: str) -> tuple[str, str]:
    i = hostport.rfind(":")
    if i < 0:
        raise ValueError(f"address {hostport}: missing port in address")

    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        after = end + 1
        if after == len(hostport):
            raise ValueError(f"address {hostport}: missing port in address")
        if after != i:
            if hostport[after] == ":":
                raise ValueError(f"address {hostport}: too many colons in address")
            raise ValueError(f"address {hostport}: missing port in address")
        host = hostport[1:end]
        if "[" in hostport[1:] or "]" in hostport[after:]:
            raise ValueError(f"address {hostport}: unexpected bracket in address")
    else:
        host = hostport[:i]
        if ":" in host:
            raise ValueError(f"address {hostport}: too many colons in address")
        if "[" in hostport or "]" in hostport:
            raise ValueError(f"address {hostport}: unexpected bracket in address")
    return host, hostport[i + 1:]


def _join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def tls_and_host_from_url(waf_url: str, port: int) -> tuple[bool, str]:
    """Return whether the URL uses TLS and its host joined with the given port."""
    parsed = urlsplit(waf_url)
    hostport = parsed.netloc.rpartition("@")[2]

    try:
        host, _ = _split_host_port(hostport)
    except ValueError as exc:
        if "port" not in str(exc):
            raise
        host = hostport

    return parsed.scheme == "https", _join_host_port(host, str(port))