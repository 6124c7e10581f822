from corsproxy.proxy.errors import RoutingError


def split_url(url: str, url_key: str) -> str:
    """Return the part of the url after url_key, without surrounding slashes.

    Example, splitting on __cors:
        http://example.com/__cors/hello.php?hello=world -> hello.php?hello=world

    This is a plain substring search, so a key that shows up in the query
    string splits there as well.
    """
    if not url_key or url_key not in url:
        raise RoutingError()

    _, sub_path = url.split(url_key, 1)
    return sub_path.strip("\\/")
