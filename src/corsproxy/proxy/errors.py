from corsproxy.proxy.status import get_http_status_text


class ProxyError(Exception):
    """Base class for failures that end the current request with an error response."""

    code = 400

    def __init__(self, code: int | None = None, reason: str | None = None):
        if code is not None:
            self.code = code
        self.reason = reason or get_http_status_text(self.code)
        super().__init__(f"{self.code} {self.reason}")


class RoutingError(ProxyError):
    """The inbound URL does not contain the URL key."""

    code = 400


class UpstreamError(ProxyError):
    """The upstream request failed, timed out or returned a fatal status."""

    code = 502
