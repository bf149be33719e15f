"""Owning-content capabilities the link checker depends on.

The services only need content that can list its fields, return the markup
values of a field in a language, describe how a field is scanned and say
whether it still exists. `ContentItem` implements this against the local
schema; other content stores can provide their own objects.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from sqlalchemy.orm import Session

from content_linkchecker.db.models import ContentItem, FieldSettings


@runtime_checkable
class OwningContent(Protocol):
    entity_type_id: str
    id: object

    def field_names(self) -> List[str]: ...

    def get_field(self, field_name: str, langcode: Optional[str] = None) -> List[str]: ...

    def field_langcodes(self, field_name: str) -> List[str]: ...

    def get_field_config(self, field_name: str) -> FieldSettings: ...

    def exists(self) -> bool: ...

    def base_path(self) -> Optional[str]: ...


class ContentLoader(Protocol):
    def load(self, entity_type_id: str, entity_id: object) -> Optional[OwningContent]: ...


class SqlContentLoader:
    """Loads `ContentItem` rows; returns None for deleted or unknown content."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, entity_type_id: str, entity_id: object) -> Optional[ContentItem]:
        try:
            pk = int(entity_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return (
            self.db.query(ContentItem)
            .filter(ContentItem.entity_type_id == entity_type_id)
            .filter(ContentItem.id == pk)
            .one_or_none()
        )


__all__ = ["ContentLoader", "OwningContent", "SqlContentLoader"]
