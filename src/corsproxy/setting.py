import os

from dotenv import load_dotenv

load_dotenv()

TITLE = "CORS Forwarding Proxy"
SUMMARY = "Same-origin endpoints that forward to a single upstream host"
VERSION = "0.1.0"
DESCRIPTION = """
Forward any request below the URL key to the configured upstream host and relay a filtered response.
"""

DEBUG = os.environ.get("DEBUG", "false").lower() != "false"
PROXY_TARGET = os.environ.get("PROXY_TARGET", "localhost")
PROXY_URL_KEY = os.environ.get("PROXY_URL_KEY", "__cors")
PROXY_SCHEME = os.environ.get("PROXY_SCHEME") or None
PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "15"))
PROXY_CONNECT_TIMEOUT = float(os.environ.get("PROXY_CONNECT_TIMEOUT", "3"))
PROXY_MAX_REDIRECTS = int(os.environ.get("PROXY_MAX_REDIRECTS", "5"))
PROXY_USER_AGENT = os.environ.get("PROXY_USER_AGENT", "corsproxy")
# Off by default to keep the legacy trust model; turn on for hardened deployments
VERIFY_UPSTREAM_CERTIFICATE = os.environ.get("VERIFY_UPSTREAM_CERTIFICATE", "false").lower() != "false"
