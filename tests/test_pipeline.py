import asyncio

from corsproxy.proxy.errors import UpstreamError
from corsproxy.proxy.pipeline import forward_request
from corsproxy.schema import InboundRequest, ProxyTarget, UpstreamResponse

TARGET = ProxyTarget(host="upstream.test")


class StubUpstreamClient:
    """Records outbound requests and answers with a canned result."""

    def __init__(self, result):
        self.result = result
        self.requests = []

    async def fetch(self, outbound):
        self.requests.append(outbound)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def run(inbound, client):
    return asyncio.run(forward_request(inbound, TARGET, client))


def test_get_is_forwarded_and_relayed():
    client = StubUpstreamClient(
        UpstreamResponse(
            status_code=200,
            header="HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nX-Debug: 1",
            body=b'{"ok":true}',
        )
    )
    inbound = InboundRequest(method="GET", url="http://proxy.test/__cors/api/data")

    envelope = run(inbound, client)

    assert client.requests[0].url == "http://upstream.test/api/data"
    assert envelope.status_code == 200
    assert envelope.headers == {"Content-Type": "Content-Type: application/json"}
    assert envelope.body == b'{"ok":true}'


def test_missing_key_never_reaches_upstream():
    client = StubUpstreamClient(UpstreamResponse(status_code=200))
    inbound = InboundRequest(method="GET", url="http://proxy.test/api/data")

    envelope = run(inbound, client)

    assert client.requests == []
    assert envelope.status_code == 400
    assert envelope.header_lines == []
    assert envelope.body == b"HTTP/1.1 400 Bad Request"


def test_upstream_failure_becomes_error_response():
    client = StubUpstreamClient(UpstreamError(504))
    inbound = InboundRequest(method="GET", url="http://proxy.test/__cors/slow")

    envelope = run(inbound, client)

    assert len(client.requests) == 1
    assert envelope.status_code == 504
    assert envelope.body == b"HTTP/1.1 504 Gateway Time-out"


def test_upstream_error_status_is_passed_through():
    client = StubUpstreamClient(UpstreamError(404))
    inbound = InboundRequest(method="POST", url="http://proxy.test/__cors/missing", body=b"x")

    envelope = run(inbound, client)

    assert client.requests[0].body == b"x"
    assert envelope.status_code == 404
    assert envelope.body == b"HTTP/1.1 404 Not Found"
