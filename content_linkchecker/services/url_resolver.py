"""
Resolve URL references found in content against the content's own URL.

Rules:
  - absolute URLs (any `scheme:`) pass through unchanged
  - scheme-relative `//host/path` gets the configured default scheme
  - framework path tokens (`internal:/x`, `base:/x`) are rebased on the site URL
  - `/path` is relative to the site root (site URL including its base path)
  - everything else is joined onto the base path with `urljoin`
    (`..` never climbs above the host)
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_PATH_TOKENS = ("internal:", "base:")


def has_scheme(url: str) -> bool:
    return bool(_SCHEME_RE.match(url))


def _absolute_base(base_path: Optional[str], site_url: str) -> str:
    """The base as an absolute URL; host-less paths hang off the site root."""
    if not base_path:
        return site_url + "/"
    if urlparse(base_path).netloc:
        return base_path
    return site_url + "/" + base_path.lstrip("/")


def resolve(
    raw_url: str,
    base_path: Optional[str] = None,
    *,
    site_url: str,
    default_scheme: str = "http",
) -> str:
    """Resolve `raw_url` to an absolute URL.

    Args:
      raw_url: URL as written in content.
      base_path: URL of the content the reference was found in. When omitted
        the site URL is used; a path without host is taken relative to it.
      site_url: Site root (scheme, host and base path), no trailing slash.
      default_scheme: Scheme given to `//host/...` references.
    """
    url = raw_url.strip()
    site_url = site_url.rstrip("/")
    if not url:
        return url

    if url.startswith("//"):
        return f"{default_scheme.rstrip(':/')}:{url}"

    for token in _PATH_TOKENS:
        if url.startswith(token):
            path = url[len(token):]
            if not path.startswith("/"):
                path = "/" + path
            return site_url + path

    if has_scheme(url):
        return url

    if url.startswith("/"):
        return site_url + url

    return urljoin(_absolute_base(base_path, site_url), url)


__all__ = ["has_scheme", "resolve"]
