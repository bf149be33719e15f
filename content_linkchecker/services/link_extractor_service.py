"""
Link extraction service.

- get_links(): resolve, classify, filter and dedupe raw URL strings
- is_link_exists(): whether a persisted link is still present in its owning content
- extract_from_entity() / save_links(): turn scan-enabled fields into link records
- update_entity_extract_index(): remember when an entity was last scanned

Blacklisting is applied by get_links() but deliberately not by
is_link_exists(): a recorded link does not vanish from its content just
because the blacklist changed after it was recorded.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from content_linkchecker.config import LinkcheckerSettings
from content_linkchecker.db.content import ContentLoader, OwningContent, SqlContentLoader
from content_linkchecker.db.link_index import LinkIndex
from content_linkchecker.db.models import LinkCheckerLink, LinkExtractIndex
from content_linkchecker.services.html_link_extractor import UnknownExtractor, get_extractor
from content_linkchecker.services.url_classifier import (
    InvalidUrl,
    classify,
    is_type_allowed,
)
from content_linkchecker.services.url_resolver import resolve

logger = logging.getLogger(__name__)

_CacheKey = Tuple[str, str, str, str, tuple]

# Field extractions kept per service; least recently used entries go first
DEFAULT_CACHE_SIZE = 1024


class LinkExtractorService:
    def __init__(
        self,
        db: Session,
        settings: LinkcheckerSettings,
        loader: Optional[ContentLoader] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        self.db = db
        self.settings = settings
        self.loader = loader or SqlContentLoader(db)
        self.index = LinkIndex(db)
        if cache_size < 1:
            raise ValueError("cache_size must be >= 1")
        self.cache_size = cache_size
        # (entity_type_id, entity_id, field, langcode, extract toggles) -> raw URLs
        self._field_cache: "OrderedDict[_CacheKey, List[str]]" = OrderedDict()

    # ---------- URL filtering ----------
    def get_links(self, urls: Iterable[object], base_path: Optional[str] = None) -> List[str]:
        """Resolved URLs that should be tracked, in first-occurrence order."""
        s = self.settings
        blacklist = s.blacklist
        seen: Set[str] = set()
        links: List[str] = []
        for url in urls:
            try:
                result = classify(
                    url,
                    base_path,
                    blacklist,
                    s.check_links_types,
                    site_url=s.site_url,
                    default_scheme=s.scheme,
                )
            except InvalidUrl as e:
                logger.warning("Skipping link: %s", e)
                continue
            if not result.kept or result.url in seen:
                continue
            seen.add(result.url)
            links.append(result.url)
        return links

    # ---------- Field extraction ----------
    def _extract_field(self, entity: OwningContent, field_name: str, langcode: str) -> List[str]:
        """Raw URL strings of one field/language, or [] if the field is not scanned."""
        config = entity.get_field_config(field_name)
        if not config.scan_enabled:
            return []
        try:
            extractor = get_extractor(config.extractor_id)
        except UnknownExtractor:
            logger.warning(
                "Field %s.%s uses unknown extractor %r; skipping",
                entity.entity_type_id,
                field_name,
                config.extractor_id,
            )
            return []

        urls: List[str] = []
        for value in entity.get_field(field_name, langcode):
            # Per-value order is not meaningful; sort for stable output
            urls.extend(sorted(extractor(value or "", self.settings.extract)))
        return urls

    def _cached_field_urls(
        self, entity: OwningContent, field_name: str, langcode: str, reload: bool
    ) -> List[str]:
        key = (
            entity.entity_type_id,
            str(entity.id),
            field_name,
            langcode,
            self.settings.extract.toggles(),
        )
        cache = self._field_cache
        if reload or key not in cache:
            cache[key] = self._extract_field(entity, field_name, langcode)
            while len(cache) > self.cache_size:
                cache.popitem(last=False)
        cache.move_to_end(key)
        return cache[key]

    def invalidate(self, entity_type_id: str, entity_id: object) -> None:
        """Drop cached extraction results of one entity."""
        owner = (entity_type_id, str(entity_id))
        for key in [k for k in self._field_cache if k[:2] == owner]:
            del self._field_cache[key]

    def reset_cache(self) -> None:
        self._field_cache.clear()

    # ---------- Existence check ----------
    def is_link_exists(self, link: LinkCheckerLink, *, reload: bool = False) -> bool:
        """Whether `link` is still referenced by its owning content field.

        Only the link type filter applies here; the blacklist does not.
        """
        entity = self.loader.load(link.parent_entity_type_id, link.parent_entity_id)
        if entity is None or not entity.exists():
            return False

        s = self.settings
        base_path = entity.base_path()
        target = resolve(link.url, base_path, site_url=s.site_url, default_scheme=s.scheme)

        raw_urls = self._cached_field_urls(entity, link.entity_field, link.entity_langcode, reload)
        for raw in raw_urls:
            result = classify(
                raw,
                base_path,
                (),
                s.check_links_types,
                site_url=s.site_url,
                default_scheme=s.scheme,
                apply_blacklist=False,
            )
            if result.url == target and is_type_allowed(result.type, s.check_links_types):
                return True
        return False

    # ---------- Entity extraction ----------
    def extract_from_entity(self, entity: OwningContent) -> List[LinkCheckerLink]:
        """Unsaved link records for every scan-enabled field of `entity`."""
        links: List[LinkCheckerLink] = []
        base_path = entity.base_path()
        for field_name in entity.field_names():
            for langcode in entity.field_langcodes(field_name):
                raw = self._extract_field(entity, field_name, langcode)
                if not raw:
                    continue
                for url in self.get_links(raw, base_path):
                    links.append(
                        LinkCheckerLink(
                            url=url,
                            parent_entity_type_id=entity.entity_type_id,
                            parent_entity_id=str(entity.id),
                            entity_field=field_name,
                            entity_langcode=langcode,
                        )
                    )
        return links

    def save_links(self, links: Iterable[LinkCheckerLink]) -> int:
        """Persist links not already in the index; returns how many were created."""
        created = 0
        for link in links:
            if self.index.exists(
                link.url,
                link.parent_entity_type_id,
                link.parent_entity_id,
                link.entity_field,
                link.entity_langcode,
            ):
                continue
            self.index.create(link)
            created += 1
        if created:
            logger.info("Created %d new link records", created)
        return created

    def update_entity_extract_index(self, entity: OwningContent) -> LinkExtractIndex:
        row = (
            self.db.query(LinkExtractIndex)
            .filter(LinkExtractIndex.entity_type_id == entity.entity_type_id)
            .filter(LinkExtractIndex.entity_id == str(entity.id))
            .one_or_none()
        )
        now = datetime.now(timezone.utc)
        if row is None:
            row = LinkExtractIndex(
                entity_type_id=entity.entity_type_id,
                entity_id=str(entity.id),
                last_extracted_at=now,
            )
            self.db.add(row)
        else:
            row.last_extracted_at = now
        self.db.flush()
        return row


__all__ = ["LinkExtractorService"]
