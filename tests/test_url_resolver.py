import pytest

from content_linkchecker.services.url_resolver import resolve

BASE = "http://host/folder1/folder2"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("../foo1/test.png", "http://host/foo1/test.png"),
        ("/foo2/test.png", "http://host/foo2/test.png"),
        ("test.png", "http://host/folder1/test.png"),
        ("../foo1/bar1", "http://host/foo1/bar1"),
        ("./foo2/bar2", "http://host/folder1/foo2/bar2"),
        ("../foo3/../foo4/foo5", "http://host/foo4/foo5"),
        ("./foo4/../foo5/foo6", "http://host/folder1/foo5/foo6"),
        ("./foo4/./foo5/foo6", "http://host/folder1/foo4/foo5/foo6"),
        ("./test/foo bar/is_valid-hack.test", "http://host/folder1/test/foo bar/is_valid-hack.test"),
        ("?page=2", BASE + "?page=2"),
        ("#top", BASE + "#top"),
        ("./docs/", "http://host/folder1/docs/"),
        ("a/b/..", "http://host/folder1/a/"),
        (".", "http://host/folder1/"),
    ],
)
def test_relative_references(raw, expected):
    assert resolve(raw, BASE, site_url="http://host") == expected


@pytest.mark.parametrize(
    "url",
    [
        "http://www.msn.de/",
        "https://example.com/a/../b",
        "mailto:test@example.com",
        "javascript:foo()",
    ],
)
def test_absolute_urls_unchanged(url):
    assert resolve(url, BASE, site_url="http://host") == url


def test_scheme_relative_gets_default_scheme():
    assert resolve("//cdn.example.com/a.js", BASE, site_url="http://host", default_scheme="https") == (
        "https://cdn.example.com/a.js"
    )


def test_internal_token_rebased_on_site():
    assert resolve("internal:/node/add", BASE, site_url="http://host/sub") == "http://host/sub/node/add"


def test_root_relative_uses_site_base_path():
    assert resolve("/foo", "http://host/sub/a/b", site_url="http://host/sub/") == "http://host/sub/foo"


def test_missing_base_falls_back_to_site():
    assert resolve("page.html", None, site_url="http://host/sub") == "http://host/sub/page.html"


def test_parent_segments_stop_at_host():
    assert resolve("../../../x", "http://host/a/b", site_url="http://host") == "http://host/x"


@pytest.mark.parametrize(
    "base",
    ["/folder1/folder2", "folder1/folder2"],
)
def test_hostless_base_hangs_off_site_root(base):
    assert resolve("img.png", base, site_url="http://host") == "http://host/folder1/img.png"
    assert resolve("../up.png", base, site_url="http://host/sub") == "http://host/sub/up.png"


def test_fragment_keeps_base_query():
    assert resolve("#top", "http://host/a?page=2", site_url="http://host") == "http://host/a?page=2#top"
