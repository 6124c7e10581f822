from urllib.parse import unquote

from fastapi import Request
from fastapi.responses import Response

from corsproxy.schema import InboundRequest, ResponseEnvelope


async def capture_inbound_request(request: Request) -> InboundRequest:
    """Capture everything the proxy needs from the incoming request, once.

    Cookie values are URL-decoded here so they are encoded exactly once on
    the way out.

    The session token is read from ``request.state.session_token``. Nothing
    in this package sets it: a deployment that runs its own session
    middleware stores the ``name=value`` pair there to have it appended to
    the forwarded Cookie header.
    """
    return InboundRequest(
        method=request.method,
        url=str(request.url),
        headers=[(k.decode("latin-1"), v.decode("latin-1")) for k, v in request.headers.raw],
        cookies={k: unquote(v) for k, v in request.cookies.items()},
        body=await request.body(),
        user_agent=request.headers.get("user-agent"),
        protocol=f"HTTP/{request.scope.get('http_version', '1.1')}",
        is_secure=request.url.scheme == "https",
        session_token=getattr(request.state, "session_token", None),
    )


def render_envelope(envelope: ResponseEnvelope, method: str = "GET") -> Response:
    response = Response(content=envelope.body, status_code=envelope.status_code)
    keep_content_length = method.upper() == "HEAD" and not envelope.body
    for line in envelope.header_lines:
        name, _, value = line.partition(":")
        name = name.strip()
        if name.lower() == "content-length":
            # Starlette computes it from the body, except HEAD has none to count
            if keep_content_length:
                response.headers["content-length"] = value.strip()
            continue
        response.headers.append(name, value.strip())
    return response
