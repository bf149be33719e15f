"""Persistence for link records (the link index).

Mutations flush immediately so later reads in the same session see them;
transaction boundaries (commit/rollback) belong to the calling service.
SQLAlchemy failures are re-raised as `LinkIndexError` so callers can retry.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from content_linkchecker.db.models import LinkCheckerLink

logger = logging.getLogger(__name__)


class LinkIndexError(RuntimeError):
    """A link index read or write failed; the operation may be retried."""


class LinkIndex:
    def __init__(self, db: Session):
        self.db = db

    # ---------- Writes ----------
    def create(self, link: LinkCheckerLink) -> LinkCheckerLink:
        try:
            self.db.add(link)
            self.db.flush()
        except SQLAlchemyError as e:
            raise LinkIndexError(f"Failed to create link {link.url!r}: {e}") from e
        return link

    def delete(self, links: Union[LinkCheckerLink, Iterable[LinkCheckerLink]]) -> int:
        if isinstance(links, LinkCheckerLink):
            links = [links]
        ids = [link.id for link in links if link.id is not None]
        return self.delete_ids(ids)

    def delete_ids(self, ids: List[int]) -> int:
        if not ids:
            return 0
        try:
            deleted = (
                self.db.query(LinkCheckerLink)
                .filter(LinkCheckerLink.id.in_(ids))
                .delete(synchronize_session="fetch")
            )
            self.db.flush()
        except SQLAlchemyError as e:
            raise LinkIndexError(f"Failed to delete {len(ids)} links: {e}") from e
        return int(deleted or 0)

    def delete_owner(self, entity_type_id: str, entity_id: object) -> int:
        return self.delete(self.load_by_owner(entity_type_id, entity_id))

    # ---------- Reads ----------
    def load_by_owner(
        self,
        entity_type_id: str,
        entity_id: object,
        field: Optional[str] = None,
    ) -> List[LinkCheckerLink]:
        q = (
            self.db.query(LinkCheckerLink)
            .filter(LinkCheckerLink.parent_entity_type_id == entity_type_id)
            .filter(LinkCheckerLink.parent_entity_id == str(entity_id))
        )
        if field is not None:
            q = q.filter(LinkCheckerLink.entity_field == field)
        return q.order_by(LinkCheckerLink.id).all()

    def load_page(self, after_id: int = 0, limit: int = 100) -> List[LinkCheckerLink]:
        """One page of records ordered by id, starting after `after_id`."""
        return (
            self.db.query(LinkCheckerLink)
            .filter(LinkCheckerLink.id > after_id)
            .order_by(LinkCheckerLink.id)
            .limit(limit)
            .all()
        )

    def load_all(self) -> List[LinkCheckerLink]:
        return self.db.query(LinkCheckerLink).order_by(LinkCheckerLink.id).all()

    def exists(
        self,
        url: str,
        entity_type_id: str,
        entity_id: object,
        field: str,
        langcode: str,
    ) -> bool:
        return (
            self.db.query(LinkCheckerLink.id)
            .filter(LinkCheckerLink.url == url)
            .filter(LinkCheckerLink.parent_entity_type_id == entity_type_id)
            .filter(LinkCheckerLink.parent_entity_id == str(entity_id))
            .filter(LinkCheckerLink.entity_field == field)
            .filter(LinkCheckerLink.entity_langcode == langcode)
            .first()
            is not None
        )

    def count_remaining(self, after_id: int = 0) -> int:
        return int(
            self.db.query(func.count(LinkCheckerLink.id))
            .filter(LinkCheckerLink.id > after_id)
            .scalar()
            or 0
        )


__all__ = ["LinkIndex", "LinkIndexError"]
