"""
HTML link extraction.

Collects every URL-bearing attribute of the element categories enabled in
`ExtractSettings`:

  a/area                 href
  audio (+source/track)  src
  embed                  src, pluginurl, pluginspage
  iframe                 src
  img                    src, longdesc
  object (+param)        data, codebase, param value (see OBJECT_PARAM_NAMES)
  video (+source/track)  poster, src

Extractors are plain functions registered by id in `EXTRACTORS`; a field's
configuration names the extractor to use.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from bs4 import BeautifulSoup

from content_linkchecker.config import ExtractSettings

logger = logging.getLogger(__name__)

OBJECT_PARAM_NAMES = {"archive", "filename", "href", "movie", "src", "url"}
OBJECT_PARAM_MOVIE_SOURCES = {"movie"}

Extractor = Callable[[str, ExtractSettings], Set[str]]


class UnknownExtractor(KeyError):
    """No extractor is registered under the requested id."""


def _attrs(tag, names: Iterable[str]) -> List[Optional[str]]:
    return [tag.get(name) for name in names]


def _media_urls(soup: BeautifulSoup, name: str, own_attrs: Iterable[str]) -> List[Optional[str]]:
    urls: List[Optional[str]] = []
    for media in soup.find_all(name):
        urls.extend(_attrs(media, own_attrs))
        for child in media.find_all(["source", "track"]):
            urls.append(child.get("src"))
    return urls


def extract_html_links(markup: str, settings: ExtractSettings) -> Set[str]:
    """Return the set of non-blank URL strings found in `markup`.

    Malformed markup is parsed best-effort; nothing here raises on bad HTML.
    """
    if not markup or not markup.strip():
        return set()

    soup = BeautifulSoup(markup, "html.parser")
    urls: List[Optional[str]] = []

    if settings.from_a:
        for tag in soup.find_all(["a", "area"]):
            urls.append(tag.get("href"))

    if settings.from_audio:
        urls.extend(_media_urls(soup, "audio", ["src"]))

    if settings.from_embed:
        for tag in soup.find_all("embed"):
            urls.extend(_attrs(tag, ["src", "pluginurl", "pluginspage"]))

    if settings.from_iframe:
        for tag in soup.find_all("iframe"):
            urls.append(tag.get("src"))

    if settings.from_img:
        for tag in soup.find_all("img"):
            urls.extend(_attrs(tag, ["src", "longdesc"]))

    if settings.from_object:
        for obj in soup.find_all("object"):
            urls.extend(_attrs(obj, ["data", "codebase"]))
            for param in obj.find_all("param"):
                if param.get("name") in OBJECT_PARAM_NAMES:
                    urls.append(param.get("value"))
                if param.get("src") in OBJECT_PARAM_MOVIE_SOURCES:
                    urls.append(param.get("value"))

    if settings.from_video:
        urls.extend(_media_urls(soup, "video", ["poster", "src"]))

    found = {u for u in urls if isinstance(u, str) and u.strip()}
    logger.debug("Extracted %d URLs from %d chars of markup", len(found), len(markup))
    return found


EXTRACTORS: Dict[str, Extractor] = {
    "html_link_extractor": extract_html_links,
}


def get_extractor(extractor_id: str) -> Extractor:
    try:
        return EXTRACTORS[extractor_id]
    except KeyError:
        raise UnknownExtractor(extractor_id) from None


__all__ = [
    "EXTRACTORS",
    "OBJECT_PARAM_NAMES",
    "UnknownExtractor",
    "extract_html_links",
    "get_extractor",
]
