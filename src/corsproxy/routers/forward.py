from typing import Annotated

from fastapi import APIRouter, Depends, Request

from corsproxy.proxy.pipeline import forward_request
from corsproxy.proxy.upstream import UpstreamClient
from corsproxy.schema import ProxyTarget
from corsproxy.setting import (
    PROXY_CONNECT_TIMEOUT,
    PROXY_MAX_REDIRECTS,
    PROXY_SCHEME,
    PROXY_TARGET,
    PROXY_TIMEOUT,
    PROXY_URL_KEY,
    PROXY_USER_AGENT,
    VERIFY_UPSTREAM_CERTIFICATE,
)
from corsproxy.utils import capture_inbound_request, render_envelope

router = APIRouter()


def get_proxy_target() -> ProxyTarget:
    return ProxyTarget(
        host=PROXY_TARGET,
        url_key=PROXY_URL_KEY,
        scheme_override=PROXY_SCHEME,
        timeout=PROXY_TIMEOUT,
        connect_timeout=PROXY_CONNECT_TIMEOUT,
        verify_upstream_certificate=VERIFY_UPSTREAM_CERTIFICATE,
        max_redirects=PROXY_MAX_REDIRECTS,
        default_user_agent=PROXY_USER_AGENT,
    )


def get_upstream_client(target: Annotated[ProxyTarget, Depends(get_proxy_target)]) -> UpstreamClient:
    return UpstreamClient(
        verify=target.verify_upstream_certificate,
        max_redirects=target.max_redirects,
    )


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
)
async def forward(
    request: Request,
    target: Annotated[ProxyTarget, Depends(get_proxy_target)],
    client: Annotated[UpstreamClient, Depends(get_upstream_client)],
):
    """Forward everything after the URL key to the upstream host."""
    inbound = await capture_inbound_request(request)
    envelope = await forward_request(inbound, target, client)
    return render_envelope(envelope, inbound.method)
