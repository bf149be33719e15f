import pytest
from pydantic import ValidationError

from content_linkchecker.config import CheckLinksTypes, LinkcheckerSettings, load_settings


def test_defaults():
    s = LinkcheckerSettings()
    assert s.extract.from_a is True
    assert s.extract.from_img is False
    assert s.check_links_types is CheckLinksTypes.EXTERNAL
    assert s.blacklist == ["example.com", "example.net", "example.org"]
    assert s.check.timeout == 30.0


def test_dotted_access():
    s = LinkcheckerSettings.from_mapping(
        {"extract.from_img": True, "check_links_types": "internal", "base_path": "example.test/sub/"}
    )
    assert s.get("extract.from_img") is True
    assert s.get("check_links_types") == "internal"
    assert s.site_url == "http://example.test/sub"
    assert s.scheme == "http"


@pytest.mark.parametrize("value, expected", [("https", "https://"), ("https:", "https://"), ("", "http://")])
def test_scheme_normalized(value, expected):
    assert LinkcheckerSettings(default_url_scheme=value).default_url_scheme == expected


def test_blacklist_skips_blank_lines():
    s = LinkcheckerSettings.from_mapping({"check.disable_link_check_for_urls": "a.test\n\n  b.test  \n"})
    assert s.blacklist == ["a.test", "b.test"]


def test_with_values_returns_copy():
    s = LinkcheckerSettings()
    changed = s.with_values(extract__from_video=True, check_links_types="all")
    assert changed.extract.from_video is True
    assert changed.check_links_types is CheckLinksTypes.ALL
    assert s.extract.from_video is False


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        LinkcheckerSettings.from_mapping({"check_links_types": "sometimes"})
    with pytest.raises(ValidationError):
        LinkcheckerSettings.from_mapping({"check.timeout": 0})


def test_load_settings_from_environ():
    s = load_settings(
        {
            "LINKCHECKER_EXTRACT_FROM_IFRAME": "1",
            "LINKCHECKER_EXTRACT_FROM_A": "no",
            "LINKCHECKER_BLACKLIST": "bad.test\\nworse.test",
            "LINKCHECKER_CHECK_LINKS_TYPES": "all",
            "LINKCHECKER_BASE_PATH": "localhost",
            "UNRELATED": "x",
        }
    )
    assert s.extract.from_iframe is True
    assert s.extract.from_a is False
    assert s.blacklist == ["bad.test", "worse.test"]
    assert s.check_links_types is CheckLinksTypes.ALL
    assert s.site_url == "http://localhost"
