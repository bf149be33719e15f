"""
URL classification for link checking.

A URL is one of:
  - unsupported: empty, not http(s) (mailto:, javascript:, data:, ...), malformed,
    or longer than MAX_URL_LENGTH once resolved
  - blacklisted: contains one of the configured blacklist substrings
  - internal: resolves onto the site's own scheme + host + port
  - external: everything else

Classification is a pure function of the URL and the settings passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
from urllib.parse import urlsplit

from content_linkchecker.config import CheckLinksTypes
from content_linkchecker.services.url_resolver import resolve

MAX_URL_LENGTH = 2048
SUPPORTED_SCHEMES = {"http", "https"}


class InvalidUrl(TypeError):
    """Raised when a value handed to the classifier is not a string."""


class LinkType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    BLACKLISTED = "blacklisted"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Classification:
    kept: bool
    type: LinkType
    url: str  # resolved form


def _origin(url: str) -> Optional[tuple]:
    """(scheme, host, port) with default ports filled in; None when malformed."""
    try:
        parts = urlsplit(url.replace(" ", "%20"))
        port = parts.port
    except ValueError:
        return None
    scheme = (parts.scheme or "").lower()
    host = (parts.hostname or "").lower()
    if scheme not in SUPPORTED_SCHEMES or not host:
        return None
    if port is None:
        port = 443 if scheme == "https" else 80
    return scheme, host, port


def is_blacklisted(url: str, patterns: Iterable[str]) -> bool:
    """Plain, case-sensitive substring match against each pattern."""
    return any(p and p in url for p in patterns)


def is_type_allowed(link_type: LinkType, allowed_types: CheckLinksTypes) -> bool:
    if link_type in (LinkType.UNSUPPORTED, LinkType.BLACKLISTED):
        return False
    if allowed_types == CheckLinksTypes.ALL:
        return True
    return link_type.value == CheckLinksTypes(allowed_types).value


def classify(
    url: object,
    base_path: Optional[str],
    blacklist: Iterable[str],
    allowed_types: CheckLinksTypes,
    *,
    site_url: str,
    default_scheme: str = "http",
    apply_blacklist: bool = True,
) -> Classification:
    """Resolve and classify a single URL.

    Raises:
      InvalidUrl: `url` is not a string.
    """
    if not isinstance(url, str):
        raise InvalidUrl(f"Expected a URL string, got {type(url).__name__}")

    if not url.strip():
        return Classification(False, LinkType.UNSUPPORTED, url)

    resolved = resolve(url, base_path, site_url=site_url, default_scheme=default_scheme)
    origin = _origin(resolved)
    if origin is None or len(resolved) > MAX_URL_LENGTH:
        return Classification(False, LinkType.UNSUPPORTED, resolved)

    if apply_blacklist and is_blacklisted(resolved, blacklist):
        return Classification(False, LinkType.BLACKLISTED, resolved)

    site_origin = _origin(site_url + "/")
    link_type = LinkType.INTERNAL if origin == site_origin else LinkType.EXTERNAL
    return Classification(is_type_allowed(link_type, allowed_types), link_type, resolved)


__all__ = [
    "Classification",
    "InvalidUrl",
    "LinkType",
    "MAX_URL_LENGTH",
    "classify",
    "is_blacklisted",
    "is_type_allowed",
]
