"""Textual SSRF guard for proxied URLs.

The checks below work on the literal URL text only. Hostnames are never
resolved, so a DNS name pointing at a private address is not caught.
"""
import re
from urllib.parse import urlsplit

import httpx
import idna

from .errors import MalformedUrlError

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_PATTERNS = [
    re.compile(r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)", re.IGNORECASE),
    re.compile(r"^https?://192\.168\.", re.IGNORECASE),
    re.compile(r"^https?://10\.", re.IGNORECASE),
    re.compile(r"^https?://172\.(1[6-9]|2[0-9]|3[0-1])\.", re.IGNORECASE),
    re.compile(r"file://", re.IGNORECASE),
    re.compile(r"^https?://169\.254\.", re.IGNORECASE),  # link-local / cloud metadata
]

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*$", re.IGNORECASE)
_HOST_SCHEMES = {"http", "https", "ws", "wss", "ftp"}


def is_dangerous(url: str) -> bool:
    if any(p.search(url) for p in BLOCKED_PATTERNS):
        return True
    scheme = url.split(":", 1)[0].lower() if ":" in url else ""
    return scheme not in ALLOWED_SCHEMES


def parse_target_url(raw: str) -> str:
    """
    Validate ``raw`` the way a URL constructor would and return it stripped.

    Raises MalformedUrlError for text that is not an absolute URL. Scheme
    restrictions are left to ``is_dangerous``.
    """
    url = raw.strip()
    try:
        parts = urlsplit(url)
        parts.port  # raises on a non-numeric or out of range port
    except ValueError:
        raise MalformedUrlError(raw)

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        raise MalformedUrlError(raw)
    if any(ch.isspace() for ch in parts.netloc):
        raise MalformedUrlError(raw)
    if parts.scheme.lower() in _HOST_SCHEMES:
        if not parts.hostname:
            raise MalformedUrlError(raw)
        try:
            httpx.URL(url)  # host syntax, IDNA for non-ASCII names
            for label in parts.hostname.split("."):
                if label.startswith("xn--"):
                    idna.decode(label)
        except (httpx.InvalidURL, UnicodeError):
            raise MalformedUrlError(raw)
    elif not (parts.netloc or parts.path):
        raise MalformedUrlError(raw)
    return url
