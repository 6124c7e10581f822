import re

from pydantic import BaseModel, ConfigDict, Field

_LINE_SPLIT = re.compile(r"[\r\n]+")


class InboundRequest(BaseModel):
    """A request as received by the hosting server, captured once."""

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: list[tuple[str, str]] = []
    cookies: dict[str, str] = {}
    body: bytes = b""
    user_agent: str | None = None
    protocol: str = "HTTP/1.1"
    is_secure: bool = False
    session_token: str | None = None


class ProxyTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    url_key: str = "__cors"
    scheme_override: str | None = None
    timeout: float = Field(default=15.0, gt=0)
    connect_timeout: float = Field(default=3.0, gt=0)
    verify_upstream_certificate: bool = False
    max_redirects: int = Field(default=5, ge=0)
    default_user_agent: str = "corsproxy"


class OutboundRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: list[tuple[str, str]] = []
    cookie: str = ""
    body: bytes | None = None
    user_agent: str
    timeout: float = 15.0
    connect_timeout: float = 3.0


class UpstreamResponse(BaseModel):
    """Status, last header block and body of an upstream transfer."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    header: str = ""
    body: bytes = b""

    @property
    def header_lines(self) -> list[str]:
        return [line for line in _LINE_SPLIT.split(self.header) if line]


class ResponseEnvelope(BaseModel):
    """What the hosting server writes back to the caller."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    header_lines: list[str] = []
    body: bytes = b""

    @property
    def headers(self) -> dict[str, str]:
        # Repeated headers (Set-Cookie) are only complete in header_lines
        return {line.split(":", 1)[0]: line for line in self.header_lines}
