from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base, object_session, relationship

Base = declarative_base()

DEFAULT_EXTRACTOR = "html_link_extractor"


@dataclass(frozen=True)
class FieldSettings:
    """Per-field scan configuration as seen by the extractor service."""

    scan_enabled: bool = False
    extractor_id: str = DEFAULT_EXTRACTOR


# --- Owning content -----------------------------------------------------------


class ContentItem(Base):
    """
    A piece of content with named, translatable, multi-value text fields.
    Implements the OwningContent protocol used by the link checker services.
    """

    __tablename__ = "content_items"

    id = Column(Integer, primary_key=True, index=True)
    entity_type_id = Column(String(64), nullable=False, default="node", index=True)
    # Absolute URL of the content; base for relative links found in its fields
    url = Column(Text, nullable=True)
    title = Column(String(500), nullable=True)
    langcode = Column(String(12), nullable=False, default="en")

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    field_values = relationship(
        "ContentFieldValue",
        back_populates="content_item",
        cascade="all, delete-orphan",
        order_by="ContentFieldValue.delta",
    )

    # ---------- OwningContent ----------
    def field_names(self) -> List[str]:
        names = {v.field_name for v in self.field_values}
        session = object_session(self)
        if session is not None:
            rows = (
                session.query(FieldConfig.field_name)
                .filter(FieldConfig.entity_type_id == self.entity_type_id)
                .all()
            )
            names.update(name for (name,) in rows)
        return sorted(names)

    def get_field(self, field_name: str, langcode: Optional[str] = None) -> List[str]:
        langcode = langcode or self.langcode or "en"
        return [
            v.value or ""
            for v in self.field_values
            if v.field_name == field_name and v.langcode == langcode
        ]

    def field_langcodes(self, field_name: str) -> List[str]:
        return sorted({v.langcode for v in self.field_values if v.field_name == field_name})

    def get_field_config(self, field_name: str) -> FieldSettings:
        session = object_session(self)
        if session is None:
            return FieldSettings()
        cfg = (
            session.query(FieldConfig)
            .filter(FieldConfig.entity_type_id == self.entity_type_id)
            .filter(FieldConfig.field_name == field_name)
            .one_or_none()
        )
        if cfg is None:
            return FieldSettings()
        return FieldSettings(scan_enabled=bool(cfg.scan), extractor_id=cfg.extractor)

    def exists(self) -> bool:
        session = object_session(self)
        if session is None or self.id is None:
            return False
        return (
            session.query(ContentItem.id).filter(ContentItem.id == self.id).first()
            is not None
        )

    def base_path(self) -> Optional[str]:
        return self.url

    def set_field(self, field_name: str, values: List[str], langcode: Optional[str] = None) -> None:
        """Replace all values of one field/language."""
        langcode = langcode or self.langcode or "en"
        self.field_values = [
            v
            for v in self.field_values
            if not (v.field_name == field_name and v.langcode == langcode)
        ] + [
            ContentFieldValue(field_name=field_name, langcode=langcode, delta=i, value=value)
            for i, value in enumerate(values)
        ]

    def __repr__(self):
        return f"<ContentItem({self.entity_type_id}:{self.id}, url={self.url})>"


class ContentFieldValue(Base):
    __tablename__ = "content_field_values"
    __table_args__ = (
        Index("ix_content_field_values_item_field", "content_item_id", "field_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content_item_id = Column(
        Integer, ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False
    )
    field_name = Column(String(128), nullable=False)
    langcode = Column(String(12), nullable=False, default="en")
    delta = Column(Integer, nullable=False, default=0)
    value = Column(Text, nullable=True)

    content_item = relationship("ContentItem", back_populates="field_values")

    def __repr__(self):
        return f"<ContentFieldValue(item={self.content_item_id}, field={self.field_name}, delta={self.delta})>"


class FieldConfig(Base):
    """Whether a field of an entity type is scanned for links, and by which extractor."""

    __tablename__ = "field_configs"
    __table_args__ = (
        UniqueConstraint("entity_type_id", "field_name", name="uq_field_config_field"),
    )

    id = Column(Integer, primary_key=True, index=True)
    entity_type_id = Column(String(64), nullable=False)
    field_name = Column(String(128), nullable=False)
    scan = Column(Boolean, nullable=False, default=False, server_default="0")
    extractor = Column(String(64), nullable=False, default=DEFAULT_EXTRACTOR)

    def __repr__(self):
        return f"<FieldConfig({self.entity_type_id}.{self.field_name}, scan={self.scan})>"


# --- Link index ---------------------------------------------------------------


class LinkCheckerLink(Base):
    """
    One discovered URL occurrence tied to the content/field/language it was found in.
    Mirrors Alembic migration 7c1e2a9d4b10.
    """

    __tablename__ = "linkchecker_link"
    __table_args__ = (
        Index("ix_linkchecker_link_parent", "parent_entity_type_id", "parent_entity_id"),
        Index("ix_linkchecker_link_last_check", "last_check"),
    )

    id = Column(Integer, primary_key=True, index=True)
    url = Column(Text, nullable=False)

    # Polymorphic owner reference; never dereferenced by the link index itself
    parent_entity_type_id = Column(String(64), nullable=False)
    parent_entity_id = Column(String(128), nullable=False)
    entity_field = Column(String(128), nullable=False)
    entity_langcode = Column(String(12), nullable=False, default="en")

    # Liveness bookkeeping
    code = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)
    fail_count = Column(Integer, nullable=False, default=0, server_default="0")
    last_check = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def set_parent_entity(self, entity) -> None:
        self.parent_entity_type_id = entity.entity_type_id
        self.parent_entity_id = str(entity.id)

    def __repr__(self):
        return (
            f"<LinkCheckerLink({self.url!r}, parent={self.parent_entity_type_id}:"
            f"{self.parent_entity_id}, field={self.entity_field})>"
        )


class LinkExtractIndex(Base):
    """When each owning content was last scanned for links."""

    __tablename__ = "linkchecker_index"
    __table_args__ = (
        UniqueConstraint("entity_type_id", "entity_id", name="uq_linkchecker_index_entity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    entity_type_id = Column(String(64), nullable=False)
    entity_id = Column(String(128), nullable=False)
    last_extracted_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<LinkExtractIndex({self.entity_type_id}:{self.entity_id} @ {self.last_extracted_at})>"
