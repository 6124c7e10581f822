from urllib.parse import quote

from corsproxy.schema import InboundRequest, OutboundRequest, ProxyTarget

# The upstream would answer these with a bodyless 304 we cannot relay
STRIPPED_REQUEST_HEADERS = frozenset({"if-none-match", "if-modified-since"})


def resolve_scheme(inbound: InboundRequest, target: ProxyTarget) -> str:
    if target.scheme_override is not None:
        return target.scheme_override
    return "https" if inbound.is_secure else "http"


def filter_request_headers(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(k, v) for k, v in headers if k.lower() not in STRIPPED_REQUEST_HEADERS]


def get_cookie_string(cookies: dict[str, str], session_token: str | None = None) -> str:
    """Serialize cookies as a Cookie header value, values URL-encoded."""
    cookie = [f"{key}={quote(value, safe='')}" for key, value in cookies.items()]

    if session_token:
        cookie.append(session_token)

    return "; ".join(cookie)


def build_outbound_request(inbound: InboundRequest, sub_path: str, target: ProxyTarget) -> OutboundRequest:
    """Translate the inbound request into the request sent to the upstream host."""
    scheme = resolve_scheme(inbound, target)
    is_post = inbound.method.lower() == "post"

    return OutboundRequest(
        method=inbound.method,
        url=f"{scheme}://{target.host}/{sub_path}",
        headers=filter_request_headers(inbound.headers),
        cookie=get_cookie_string(inbound.cookies, inbound.session_token),
        body=inbound.body if is_post else None,
        user_agent=inbound.user_agent or target.default_user_agent,
        timeout=target.timeout,
        connect_timeout=target.connect_timeout,
    )
