import logging

from corsproxy.proxy.errors import ProxyError, RoutingError
from corsproxy.proxy.relay import error_response, relay_response
from corsproxy.proxy.splitter import split_url
from corsproxy.proxy.translator import build_outbound_request
from corsproxy.proxy.upstream import UpstreamClient
from corsproxy.schema import InboundRequest, ProxyTarget, ResponseEnvelope

logger = logging.getLogger(__name__)


async def forward_request(
    inbound: InboundRequest,
    target: ProxyTarget,
    client: UpstreamClient,
) -> ResponseEnvelope:
    """Forward one inbound request and return the single response for it.

    Routing and upstream failures end the request with a status-only
    response; nothing is retried.
    """
    try:
        sub_path = split_url(inbound.url, target.url_key)
        outbound = build_outbound_request(inbound, sub_path, target)
        upstream = await client.fetch(outbound)
    except RoutingError as e:
        logger.warning(f"No '{target.url_key}' in url, rejecting: {inbound.method} {inbound.url}")
        return error_response(e.code, e.reason)
    except ProxyError as e:
        return error_response(e.code, e.reason)

    return relay_response(upstream)
