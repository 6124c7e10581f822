from corsproxy.proxy.translator import (
    build_outbound_request,
    filter_request_headers,
    get_cookie_string,
    resolve_scheme,
)
from corsproxy.schema import InboundRequest, ProxyTarget

TARGET = ProxyTarget(host="upstream.test")


def make_inbound(**kwargs) -> InboundRequest:
    values = {"url": "http://proxy.test/__cors/api/data"}
    values.update(kwargs)
    return InboundRequest(**values)


def test_outbound_url_joins_scheme_host_and_sub_path():
    outbound = build_outbound_request(make_inbound(), "api/data", TARGET)

    assert outbound.url == "http://upstream.test/api/data"


def test_empty_sub_path_keeps_trailing_slash():
    outbound = build_outbound_request(make_inbound(), "", TARGET)

    assert outbound.url == "http://upstream.test/"


def test_scheme_follows_inbound_tls():
    assert resolve_scheme(make_inbound(is_secure=True), TARGET) == "https"
    assert resolve_scheme(make_inbound(is_secure=False), TARGET) == "http"


def test_scheme_override_wins():
    target = ProxyTarget(host="upstream.test", scheme_override="https")

    assert resolve_scheme(make_inbound(is_secure=False), target) == "https"
    outbound = build_outbound_request(make_inbound(), "x", target)
    assert outbound.url == "https://upstream.test/x"


def test_validation_headers_are_never_forwarded():
    inbound = make_inbound(
        headers=[
            ("Accept", "application/json"),
            ("If-None-Match", '"abc"'),
            ("if-modified-since", "Wed, 21 Oct 2015 07:28:00 GMT"),
            ("X-Custom", "1"),
        ]
    )

    outbound = build_outbound_request(inbound, "api/data", TARGET)

    names = [name.lower() for name, _ in outbound.headers]
    assert "if-none-match" not in names
    assert "if-modified-since" not in names
    assert ("Accept", "application/json") in outbound.headers
    assert ("X-Custom", "1") in outbound.headers


def test_filter_request_headers_keeps_order():
    headers = [("B", "2"), ("If-None-Match", "x"), ("A", "1")]

    assert filter_request_headers(headers) == [("B", "2"), ("A", "1")]


def test_post_body_is_forwarded_unchanged():
    inbound = make_inbound(method="POST", body=b"a=1&b=2")

    assert build_outbound_request(inbound, "form", TARGET).body == b"a=1&b=2"


def test_post_match_is_case_insensitive():
    inbound = make_inbound(method="post", body=b"payload")

    outbound = build_outbound_request(inbound, "form", TARGET)

    assert outbound.body == b"payload"
    assert outbound.method == "post"


def test_other_methods_send_no_body():
    for method in ("GET", "PUT", "PATCH", "DELETE"):
        inbound = make_inbound(method=method, body=b"ignored")
        assert build_outbound_request(inbound, "x", TARGET).body is None


def test_cookie_string_url_encodes_values_in_order():
    assert get_cookie_string({"a": "1", "b": "x y"}) == "a=1; b=x%20y"


def test_cookie_string_appends_session_token():
    cookie = get_cookie_string({"a": "1", "b": "x y"}, "PHPSESSID=abc123")

    assert cookie == "a=1; b=x%20y; PHPSESSID=abc123"


def test_cookie_string_empty():
    assert get_cookie_string({}) == ""


def test_outbound_copies_user_agent_and_timeouts():
    target = ProxyTarget(host="upstream.test", timeout=20, connect_timeout=1.5)
    inbound = make_inbound(user_agent="Mozilla/5.0", cookies={"sid": "42"})

    outbound = build_outbound_request(inbound, "x", target)

    assert outbound.user_agent == "Mozilla/5.0"
    assert outbound.cookie == "sid=42"
    assert outbound.timeout == 20
    assert outbound.connect_timeout == 1.5


def test_missing_user_agent_falls_back_to_default():
    outbound = build_outbound_request(make_inbound(), "x", TARGET)

    assert outbound.user_agent == "corsproxy"
