"""Persistence package: ORM models, content loading and the link index."""

from .content import ContentLoader, OwningContent, SqlContentLoader
from .link_index import LinkIndex, LinkIndexError
from .models import (
    Base,
    ContentFieldValue,
    ContentItem,
    FieldConfig,
    FieldSettings,
    LinkCheckerLink,
    LinkExtractIndex,
)

__all__ = [
    "Base",
    "ContentFieldValue",
    "ContentItem",
    "ContentLoader",
    "FieldConfig",
    "FieldSettings",
    "LinkCheckerLink",
    "LinkExtractIndex",
    "LinkIndex",
    "LinkIndexError",
    "OwningContent",
    "SqlContentLoader",
]
