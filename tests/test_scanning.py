import hashlib

import pytest

from wafprobe.scanning import (
    TestCase,
    TestWork,
    check_blocking,
    check_pass,
    debug_header_value,
    grpc_code_to_http_status,
    produce_tests,
    tls_and_host_from_url,
)

ENCODERS = ["Base64", "Base64Flat", "JSUnicode", "URL", "Plain", "XMLEntity"]
PLACEHOLDERS = [
    "Header", "HTMLForm", "HTMLMultipartForm", "JSONBody", "JSONRequest",
    "RequestBody", "SOAPBody", "URLParam", "URLPath", "XMLBody", "gRPC",
]
TEST_SETS = ["test-set1", "test-set2", "test-set3"]
PAYLOADS = ["bypassed", "blocked", "unresolved"]


def _generate_test_cases():
    cases = []
    expected = {}
    for test_set in TEST_SETS:
        for placeholder in PLACEHOLDERS:
            for encoder in ENCODERS:
                name = f"{placeholder}-{encoder}"
                cases.append(
                    TestCase(
                        set_name=test_set,
                        name=name,
                        payloads=list(PAYLOADS),
                        encoders=[encoder],
                        placeholders=[placeholder],
                        is_true_positive=True,
                    )
                )
                for payload in PAYLOADS:
                    h = hashlib.sha256()
                    for part in (test_set, name, placeholder, encoder, payload):
                        h.update(part.encode())
                    expected[h.hexdigest()] = (
                        f"set={test_set},name={name},"
                        f"placeholder={placeholder},encoder={encoder}"
                    )
    return cases, expected


def test_all_generated_cases_are_processed_exactly_once():
    cases, remaining = _generate_test_cases()
    for work in produce_tests(cases, enable_debug_header=True):
        info = remaining.pop(work.debug_header_value)
        assert info == (
            f"set={work.set_name},name={work.case_name},"
            f"placeholder={work.placeholder},encoder={work.encoder}"
        )
    assert remaining == {}


def test_debug_header_matches_case_hash():
    cases, expected = _generate_test_cases()
    value = debug_header_value("test-set1", "URLParam-URL", "URLParam", "URL", "blocked")
    assert value in expected
    assert len(value) == 64


def test_produce_tests_order_and_fields():
    case = TestCase(
        set_name="s",
        name="n",
        payloads=["p1", "p2"],
        encoders=["e1", "e2"],
        placeholders=["h1"],
        test_type="sqli",
        is_true_positive=False,
    )
    works = list(produce_tests([case], enable_debug_header=False))
    assert [(w.payload, w.encoder, w.placeholder) for w in works] == [
        ("p1", "e1", "h1"),
        ("p1", "e2", "h1"),
        ("p2", "e1", "h1"),
        ("p2", "e2", "h1"),
    ]
    assert all(w.debug_header_value == "" for w in works)
    assert all(w.test_type == "sqli" for w in works)


def test_produce_tests_empty():
    assert list(produce_tests([], True)) == []


def test_to_info():
    work = TestWork("set", "case", "pay", "URL", "URLParam", "xss", True, "")
    info = work.to_info(403)
    assert info.test_set == "set"
    assert info.test_case == "case"
    assert info.payload == "pay"
    assert info.encoder == "URL"
    assert info.placeholder == "URLParam"
    assert info.response_status_code == 403
    assert info.test_type == "xss"


@pytest.mark.parametrize(
    "status, blocked, passed",
    [(200, False, True), (403, True, False), (404, False, True), (500, False, False)],
)
def test_status_code_classification(status, blocked, passed):
    assert check_blocking("", status, "", [403]) is blocked
    assert check_pass("", status, "", [200, 404]) is passed


def test_regex_takes_precedence_over_status():
    assert check_blocking("Access denied", 200, "denied", [200]) is True
    assert check_blocking("welcome", 403, "denied", [403]) is False
    assert check_pass("all good", 403, "good", []) is True


def test_invalid_regex_is_not_a_match():
    assert check_blocking("anything", 403, "(", [403]) is False
    assert check_pass("anything", 200, "[", [200]) is False


@pytest.mark.parametrize(
    "code, status",
    [(0, 200), (1, 499), (2, 500), (3, 400), (4, 504), (5, 404), (6, 409),
     (7, 403), (8, 429), (9, 400), (10, 409), (11, 400), (12, 501), (13, 500),
     (14, 503), (15, 500), (16, 401), (99, 500)],
)
def test_grpc_code_to_http_status(code, status):
    assert grpc_code_to_http_status(code) == status


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://localhost:8080", (False, "localhost:9000")),
        ("https://example.com/path", (True, "example.com:9000")),
        ("https://example.com:443", (True, "example.com:9000")),
        ("http://[::1]:80/", (False, "[::1]:9000")),
    ],
)
def test_tls_and_host_from_url(url, expected):
    assert tls_and_host_from_url(url, 9000) == expected


def test_tls_and_host_too_many_colons():
    with pytest.raises(ValueError, match="too many colons"):
        tls_and_host_from_url("http://a:b:c", 9000)