import re

from corsproxy.proxy.status import get_http_status_text
from corsproxy.schema import ResponseEnvelope, UpstreamResponse

# Response headers passed back to the caller, see RFC 2616
HEADER_ALLOW_LIST = frozenset(
    {
        "content-type",
        "content-language",
        "set-cookie",
        "cache-control",
        "content-length",
        "x-frame-options",
        "date",
        "expires",
        "pragma",
        "server",
    }
)

_ALLOWED_HEADER = re.compile(
    "^(?:" + "|".join(re.escape(name) for name in sorted(HEADER_ALLOW_LIST)) + "):",
    re.IGNORECASE,
)


def is_allowed_header(line: str) -> bool:
    return _ALLOWED_HEADER.match(line) is not None


def relay_response(upstream: UpstreamResponse) -> ResponseEnvelope:
    """Keep allow-listed header lines verbatim, copy status and body as they are."""
    return ResponseEnvelope(
        status_code=upstream.status_code,
        header_lines=[line for line in upstream.header_lines if is_allowed_header(line)],
        body=upstream.body,
    )


def error_response(code: int = 400, message: str | None = None) -> ResponseEnvelope:
    """Terminal response carrying only the status line text."""
    if message is None:
        message = get_http_status_text(code)
    return ResponseEnvelope(
        status_code=code,
        body=f"HTTP/1.1 {code} {message}".encode("utf-8"),
    )
