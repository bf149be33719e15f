import pytest

from content_linkchecker.config import CheckLinksTypes
from content_linkchecker.services.url_classifier import (
    InvalidUrl,
    LinkType,
    MAX_URL_LENGTH,
    classify,
)

SITE = "http://localhost"
BASE = SITE + "/folder1/folder2"


def _classify(url, allowed=CheckLinksTypes.ALL, blacklist=(), **kw):
    return classify(url, BASE, blacklist, allowed, site_url=SITE, **kw)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "   ",
        "mailto:test@example.com",
        "javascript:foo()",
        "data:image/png;base64,iVBORw0KGgo=",
        "ftp://ftp.example.net/file",
        "http://host:notaport/x",
    ],
)
def test_unsupported_never_kept(url):
    result = _classify(url)
    assert result.type is LinkType.UNSUPPORTED
    assert result.kept is False


def test_http_urls_are_never_unsupported():
    for url in ["http://www.msn.de/", "https://example.com/test.html#test%20ABC", "HTTPS://Example.com"]:
        assert _classify(url).type is not LinkType.UNSUPPORTED


def test_length_limit():
    prefix = "https://httpbin.org/anything/"
    at_limit = prefix + "x" * (MAX_URL_LENGTH - len(prefix))
    too_long = at_limit + "xx"
    assert _classify(at_limit).kept is True
    assert _classify(too_long).type is LinkType.UNSUPPORTED


def test_internal_vs_external():
    assert _classify("../foo1/test.png").type is LinkType.INTERNAL
    assert _classify("/foo2/test.png").type is LinkType.INTERNAL
    assert _classify("http://localhost:80/a").type is LinkType.INTERNAL
    assert _classify("https://localhost/a").type is LinkType.EXTERNAL
    assert _classify("http://www.adobe.com/").type is LinkType.EXTERNAL


def test_allowed_types_filter():
    assert _classify("/a", CheckLinksTypes.INTERNAL).kept is True
    assert _classify("/a", CheckLinksTypes.EXTERNAL).kept is False
    assert _classify("http://www.msn.de/", CheckLinksTypes.EXTERNAL).kept is True
    assert _classify("http://www.msn.de/", CheckLinksTypes.INTERNAL).kept is False


def test_blacklist_is_case_sensitive_substring():
    blacklist = [".com"]
    assert _classify("http://example.community/", blacklist=blacklist).type is LinkType.BLACKLISTED
    assert _classify("http://EXAMPLE.COM/", blacklist=blacklist).type is LinkType.EXTERNAL


def test_blacklist_can_be_skipped():
    result = _classify("http://example.com/x", blacklist=["example.com"], apply_blacklist=False)
    assert result.type is LinkType.EXTERNAL
    assert result.kept is True


@pytest.mark.parametrize("value", [None, 42, b"http://example.com", ["http://x"]])
def test_non_string_raises_invalid_url(value):
    with pytest.raises(InvalidUrl):
        _classify(value)
