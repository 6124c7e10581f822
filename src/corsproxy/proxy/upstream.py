import asyncio
import logging
import re
from enum import Enum

import httpx

from corsproxy.proxy.errors import UpstreamError
from corsproxy.schema import OutboundRequest, UpstreamResponse
from corsproxy.setting import DEBUG

logger = logging.getLogger(__name__)

STATUS_LINE_PREFIX = b"HTTP/1."

# Header/body separation: a two character line terminator repeated, e.g. \r\n\r\n
BLOCK_BOUNDARY = re.compile(rb"([\r\n][\r\n])\1")

# Set by the transport for every hop rather than copied from the inbound request
TRANSPORT_MANAGED_HEADERS = frozenset(
    {
        "host",
        "content-length",
        "transfer-encoding",
        "connection",
        "cookie",
        "user-agent",
        "accept-encoding",
    }
)


class ParseState(Enum):
    SEEKING_HEADER = "seeking_header"
    IN_HEADER = "in_header"
    IN_BODY = "in_body"


class TransferParser:
    """Split a raw transfer into its last header block and the body.

    A transfer that followed redirects carries one header block per hop
    before the final body. Blocks are scanned in order: every block starting
    with a status line replaces the retained header, and the first block that
    is not a header starts the body, which runs to the end of the transfer.
    """

    def __init__(self, raw: bytes):
        self.raw = raw
        self.state = ParseState.SEEKING_HEADER
        self.header = b""
        self.body = b""

    def _blocks(self):
        position = 0
        for boundary in BLOCK_BOUNDARY.finditer(self.raw):
            yield self.raw[position:boundary.start()], position
            position = boundary.end()
        yield self.raw[position:], position

    def parse(self) -> tuple[bytes, bytes]:
        for block, offset in self._blocks():
            if block.startswith(STATUS_LINE_PREFIX):
                self.header = block
                self.state = ParseState.IN_HEADER
            else:
                self.body = self.raw[offset:]
                self.state = ParseState.IN_BODY
                break
        return self.header, self.body


def parse_transfer(raw: bytes) -> tuple[bytes, bytes]:
    return TransferParser(raw).parse()


def parse_status_code(header: bytes, default: int) -> int:
    status_line = header.split(b"\r\n", 1)[0].split(b"\n", 1)[0]
    parts = status_line.split()
    if len(parts) >= 2 and parts[1].isdigit():
        return int(parts[1])
    return default


def serialize_head(response: httpx.Response) -> bytes:
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    lines = [status_line.encode("latin-1")]
    lines.extend(name + b": " + value for name, value in response.headers.raw)
    return b"\r\n".join(lines) + b"\r\n\r\n"


def assemble_transfer(response: httpx.Response) -> bytes:
    """Rebuild the raw transfer: every hop's header block, then the final body."""
    hops = [*response.history, response]
    return b"".join(serialize_head(hop) for hop in hops) + response.content


def encode_header(value: str) -> bytes:
    """Header text back to wire bytes; inbound headers were decoded as latin-1."""
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


def build_transport_headers(outbound: OutboundRequest) -> list[tuple[bytes, bytes]]:
    headers = [
        (encode_header(k), encode_header(v))
        for k, v in outbound.headers
        if k.lower() not in TRANSPORT_MANAGED_HEADERS
    ]
    headers.append((b"User-Agent", encode_header(outbound.user_agent)))
    # Keeps the relayed Content-Length in line with the body we hand back
    headers.append((b"Accept-Encoding", b"identity"))
    return headers


class UpstreamClient:
    """Sends an outbound request to the upstream host, one connection per call.

    Certificate verification is off unless verify is set: the proxy trusts
    whatever host it has been configured to reach.
    """

    def __init__(
        self,
        verify: bool = False,
        max_redirects: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.verify = verify
        self.max_redirects = max_redirects
        self.transport = transport

    async def fetch(self, outbound: OutboundRequest) -> UpstreamResponse:
        if DEBUG:
            logger.info(f"Proxying {outbound.method} to: {outbound.url}")
            logger.info(f"Headers: {outbound.headers}")

        try:
            response = await asyncio.wait_for(self._send(outbound), timeout=outbound.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Upstream request timed out: {outbound.method} {outbound.url}")
            raise UpstreamError(504) from e
        except httpx.TooManyRedirects as e:
            logger.warning(f"Too many redirects: {outbound.method} {outbound.url}")
            raise UpstreamError(502) from e
        except httpx.HTTPError as e:
            logger.warning(f"Upstream request failed: {e}")
            raise UpstreamError(502) from e

        if response.status_code >= 400:
            logger.warning(f"Upstream returned error: {response.status_code}")
            raise UpstreamError(response.status_code)

        header, body = parse_transfer(assemble_transfer(response))
        return UpstreamResponse(
            status_code=parse_status_code(header, response.status_code),
            header=header.decode("latin-1"),
            body=body,
        )

    async def _send(self, outbound: OutboundRequest) -> httpx.Response:
        async def add_cookie(request: httpx.Request):
            # Runs for every hop, redirects included
            if outbound.cookie:
                request.headers["Cookie"] = outbound.cookie

        timeout = httpx.Timeout(outbound.timeout, connect=outbound.connect_timeout)
        async with httpx.AsyncClient(
            verify=self.verify,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            timeout=timeout,
            transport=self.transport,
            event_hooks={"request": [add_cookie]},
        ) as client:
            return await client.request(
                outbound.method,
                outbound.url,
                headers=build_transport_headers(outbound),
                content=outbound.body,
            )
