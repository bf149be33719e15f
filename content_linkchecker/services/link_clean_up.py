"""
Link index clean-up.

- clean_up_for_entity(): delete an entity's link records that are no longer in its content
- delete_for_entity(): content was deleted; drop all of its link records
- remove_all_batch(): paged, resumable, cancellable removal of every link record

Clean-up of one entity runs under a lock keyed by (entity_type_id, entity_id)
and inside a single transaction, so two runs for the same content cannot
interleave their read-compare-delete steps. Different entities do not block
each other.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from content_linkchecker.db.content import OwningContent
from content_linkchecker.db.link_index import LinkIndex, LinkIndexError
from content_linkchecker.db.models import LinkExtractIndex
from content_linkchecker.services.link_extractor_service import LinkExtractorService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

_OwnerKey = Tuple[str, str]


class _OwnerLock:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0  # holders + waiters, guarded by _OwnerLocks._guard


class _OwnerLocks:
    """One lock per owner, dropped again once nobody holds or waits for it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[_OwnerKey, _OwnerLock] = {}

    @contextmanager
    def hold(self, key: _OwnerKey) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _OwnerLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def is_tracked(self, key: _OwnerKey) -> bool:
        with self._guard:
            return key in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared across LinkCleanUp instances of the process
_OWNER_LOCKS = _OwnerLocks()


class LinkCleanUp:
    def __init__(self, db: Session, extractor: LinkExtractorService):
        self.db = db
        self.extractor = extractor
        self.index = LinkIndex(db)

    def clean_up_for_entity(self, entity: OwningContent) -> int:
        """Delete link records of `entity` absent from its current content.

        Creates nothing. Returns the number of records deleted.
        """
        key = (entity.entity_type_id, str(entity.id))
        with _OWNER_LOCKS.hold(key):
            try:
                current: Set[Tuple[str, str, str]] = set()
                if entity.exists():
                    for link in self.extractor.extract_from_entity(entity):
                        current.add((link.entity_field, link.entity_langcode, link.url))

                stale = [
                    link
                    for link in self.index.load_by_owner(*key)
                    if (link.entity_field, link.entity_langcode, link.url) not in current
                ]
                deleted = self.index.delete(stale)
                self.db.commit()
            except (SQLAlchemyError, LinkIndexError) as e:
                self.db.rollback()
                if isinstance(e, LinkIndexError):
                    raise
                raise LinkIndexError(f"Clean-up failed for {key[0]}:{key[1]}: {e}") from e

        self.extractor.invalidate(*key)
        if deleted:
            logger.info("Removed %d stale links of %s:%s", deleted, *key)
        return deleted

    def delete_for_entity(self, entity_type_id: str, entity_id: object) -> int:
        """Owning content was deleted: remove its link records and extract index row."""
        key = (entity_type_id, str(entity_id))
        with _OWNER_LOCKS.hold(key):
            try:
                deleted = self.index.delete_owner(*key)
                (
                    self.db.query(LinkExtractIndex)
                    .filter(LinkExtractIndex.entity_type_id == key[0])
                    .filter(LinkExtractIndex.entity_id == key[1])
                    .delete(synchronize_session="fetch")
                )
                self.db.commit()
            except (SQLAlchemyError, LinkIndexError) as e:
                self.db.rollback()
                if isinstance(e, LinkIndexError):
                    raise
                raise LinkIndexError(f"Delete failed for {key[0]}:{key[1]}: {e}") from e

        self.extractor.invalidate(*key)
        logger.info("Removed %d links of deleted content %s:%s", deleted, *key)
        return deleted

    def remove_all_batch(self, page_size: int = DEFAULT_PAGE_SIZE) -> "RemoveAllBatch":
        """Start a paged removal of the whole link index; drive it with run()."""
        return RemoveAllBatch(self.db, page_size=page_size)


@dataclass
class RemoveAllBatch:
    """
    Removes every link record one page at a time.

    Each page is deleted and committed on its own, and the cursor (last deleted
    id) only advances after the commit. A failed page is rolled back and
    retried from the same cursor. A new batch over an already-empty index
    finishes immediately.
    """

    db: Session
    page_size: int = DEFAULT_PAGE_SIZE
    cursor: int = 0
    deleted: int = 0
    pages: int = 0
    total: Optional[int] = field(default=None)

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.total = LinkIndex(self.db).count_remaining()

    @property
    def finished(self) -> bool:
        return LinkIndex(self.db).count_remaining() == 0

    @property
    def progress(self) -> float:
        if not self.total:
            return 1.0
        return min(1.0, self.deleted / float(self.total))

    def process_page(self) -> int:
        """Delete the next page; returns the number of records removed."""
        index = LinkIndex(self.db)
        try:
            ids = [link.id for link in index.load_page(self.cursor, self.page_size)]
            if not ids and self.cursor:
                # Records may have been added behind the cursor; start over.
                ids = [link.id for link in index.load_page(0, self.page_size)]
            if not ids:
                return 0
            removed = index.delete_ids(ids)
            self.db.commit()
        except (SQLAlchemyError, LinkIndexError) as e:
            self.db.rollback()
            logger.warning("Link removal page after id %d failed: %s", self.cursor, e)
            if isinstance(e, LinkIndexError):
                raise
            raise LinkIndexError(f"Failed to delete page after id {self.cursor}: {e}") from e

        self.cursor = max(ids)
        self.deleted += removed
        self.pages += 1
        logger.debug("Removed page %d (%d links, cursor=%d)", self.pages, removed, self.cursor)
        return removed

    def run(self, cancel_event: Optional[threading.Event] = None) -> int:
        """Process pages until the index is empty or `cancel_event` is set."""
        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Link removal cancelled after %d links", self.deleted)
                break
            if not self.process_page():
                break
        if self.finished:
            logger.info("Link removal finished: %d links in %d pages", self.deleted, self.pages)
        return self.deleted


__all__ = ["DEFAULT_PAGE_SIZE", "LinkCleanUp", "RemoveAllBatch"]
