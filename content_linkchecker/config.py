"""Link checker settings.

Options mirror the dotted keys of the link checker configuration:

- extract.from_a / from_audio / from_embed / from_iframe / from_img / from_object / from_video
- check.disable_link_check_for_urls  (newline-delimited blacklist)
- check.timeout / check.interval     (liveness checks)
- check_links_types                  (internal | external | all)
- default_url_scheme, base_path      (site URL used when no request is available)

Values are read from the real environment and `.env` (LINKCHECKER_* variables).
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class CheckLinksTypes(str, Enum):
    ALL = "all"
    EXTERNAL = "external"
    INTERNAL = "internal"


class ExtractSettings(BaseModel):
    """Which element categories the HTML extractor visits."""

    from_a: bool = True
    from_audio: bool = False
    from_embed: bool = False
    from_iframe: bool = False
    from_img: bool = False
    from_object: bool = False
    from_video: bool = False

    def toggles(self) -> tuple:
        return (
            self.from_a,
            self.from_audio,
            self.from_embed,
            self.from_iframe,
            self.from_img,
            self.from_object,
            self.from_video,
        )


class CheckSettings(BaseModel):
    disable_link_check_for_urls: str = Field(
        default="example.com\nexample.net\nexample.org",
        description="One substring per line; matching URLs are never checked",
    )
    timeout: float = Field(default=30.0, gt=0, description="Seconds per liveness request")
    interval: int = Field(default=2419200, ge=0, description="Seconds between re-checks")


class LinkcheckerSettings(BaseModel):
    extract: ExtractSettings = Field(default_factory=ExtractSettings)
    check: CheckSettings = Field(default_factory=CheckSettings)
    check_links_types: CheckLinksTypes = CheckLinksTypes.EXTERNAL
    default_url_scheme: str = "http://"
    base_path: str = ""

    @field_validator("default_url_scheme")
    @classmethod
    def _scheme_has_separator(cls, value: str) -> str:
        value = (value or "http://").strip()
        if not value.endswith("://"):
            value = value.rstrip(":/") + "://"
        return value

    # ---------- derived values ----------
    @property
    def blacklist(self) -> List[str]:
        """Blacklist patterns, one per non-blank line."""
        return [
            line.strip()
            for line in self.check.disable_link_check_for_urls.splitlines()
            if line.strip()
        ]

    @property
    def site_url(self) -> str:
        """Site root URL (scheme + host + base path) without a trailing slash."""
        return (self.default_url_scheme + self.base_path).rstrip("/")

    @property
    def scheme(self) -> str:
        return self.default_url_scheme[: -len("://")]

    # ---------- dotted access ----------
    def get(self, key: str) -> Any:
        node: Any = self
        for part in key.split("."):
            node = getattr(node, part)
        if isinstance(node, Enum):
            return node.value
        return node

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "LinkcheckerSettings":
        """Build settings from dotted keys, e.g. {"extract.from_img": True}."""
        nested: Dict[str, Any] = {}
        for key, value in values.items():
            parts = key.split(".")
            target = nested
            for part in parts[:-1]:
                target = target.setdefault(part, {})
            target[parts[-1]] = value
        return cls.model_validate(nested)

    def with_values(self, **dotted: Any) -> "LinkcheckerSettings":
        """Return a copy with some dotted options replaced (``extract__from_img=True``)."""
        data = self.model_dump()
        for key, value in dotted.items():
            parts = key.split("__")
            target = data
            for part in parts[:-1]:
                target = target[part]
            target[parts[-1]] = value
        return LinkcheckerSettings.model_validate(data)


_TRUE = {"1", "true", "True", "yes", "on"}

_ENV_KEYS = {
    "LINKCHECKER_EXTRACT_FROM_A": "extract.from_a",
    "LINKCHECKER_EXTRACT_FROM_AUDIO": "extract.from_audio",
    "LINKCHECKER_EXTRACT_FROM_EMBED": "extract.from_embed",
    "LINKCHECKER_EXTRACT_FROM_IFRAME": "extract.from_iframe",
    "LINKCHECKER_EXTRACT_FROM_IMG": "extract.from_img",
    "LINKCHECKER_EXTRACT_FROM_OBJECT": "extract.from_object",
    "LINKCHECKER_EXTRACT_FROM_VIDEO": "extract.from_video",
    "LINKCHECKER_BLACKLIST": "check.disable_link_check_for_urls",
    "LINKCHECKER_CHECK_TIMEOUT": "check.timeout",
    "LINKCHECKER_CHECK_INTERVAL": "check.interval",
    "LINKCHECKER_CHECK_LINKS_TYPES": "check_links_types",
    "LINKCHECKER_DEFAULT_URL_SCHEME": "default_url_scheme",
    "LINKCHECKER_BASE_PATH": "base_path",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> LinkcheckerSettings:
    """Read settings from the environment (and `.env` when using os.environ)."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    values: Dict[str, Any] = {}
    for env_key, option in _ENV_KEYS.items():
        raw = environ.get(env_key)
        if raw is None:
            continue
        if option.startswith("extract."):
            values[option] = raw in _TRUE
        elif option == "check.disable_link_check_for_urls":
            # Allow a single-line env value with literal "\n" separators
            values[option] = raw.replace("\\n", "\n")
        else:
            values[option] = raw
    return LinkcheckerSettings.from_mapping(values)


__all__ = [
    "CheckLinksTypes",
    "CheckSettings",
    "ExtractSettings",
    "LinkcheckerSettings",
    "load_settings",
]
