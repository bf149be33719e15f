"""
Liveness checks for indexed links.

Every request is bounded by `check.timeout`; a failed fetch is recorded on the
link (code/error/fail_count) rather than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import requests
from sqlalchemy import or_
from sqlalchemy.orm import Session

from content_linkchecker.config import LinkcheckerSettings
from content_linkchecker.db.models import LinkCheckerLink

logger = logging.getLogger(__name__)

USER_AGENT = "content-linkchecker/0.1 (+link liveness check)"


@dataclass(frozen=True)
class FetchResult:
    code: Optional[int]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code is not None and self.code < 400


Fetcher = Callable[..., FetchResult]


def fetch_status(url: str, *, timeout: float) -> FetchResult:
    """HEAD the URL (GET when HEAD is not allowed) and return its final status."""
    headers = {"User-Agent": USER_AGENT}
    try:
        response = requests.head(url, timeout=timeout, allow_redirects=True, headers=headers)
        if response.status_code == 405:
            response = requests.get(
                url, timeout=timeout, allow_redirects=True, headers=headers, stream=True
            )
            response.close()
        return FetchResult(response.status_code)
    except requests.exceptions.Timeout:
        logger.warning("Timeout checking URL: %s", url)
        return FetchResult(None, "timeout")
    except requests.exceptions.RequestException as e:
        logger.warning("Error checking URL %s: %s", url, e)
        return FetchResult(None, str(e))


class LinkStatusChecker:
    def __init__(
        self,
        db: Session,
        settings: LinkcheckerSettings,
        fetch: Fetcher = fetch_status,
    ):
        self.db = db
        self.settings = settings
        self.fetch = fetch

    def check_link(self, link: LinkCheckerLink) -> FetchResult:
        result = self.fetch(link.url, timeout=self.settings.check.timeout)
        link.code = result.code
        link.error = result.error
        link.last_check = datetime.now(timezone.utc)
        if result.ok:
            link.fail_count = 0
        else:
            link.fail_count = (link.fail_count or 0) + 1
            logger.info("Broken link %s (status=%s, fails=%d)", link.url, result.code, link.fail_count)
        return result

    def due_links(self, limit: int = 50) -> List[LinkCheckerLink]:
        """Links never checked, then those last checked before the check interval."""
        threshold = datetime.now(timezone.utc) - timedelta(seconds=self.settings.check.interval)
        return (
            self.db.query(LinkCheckerLink)
            .filter(
                or_(
                    LinkCheckerLink.last_check.is_(None),
                    LinkCheckerLink.last_check < threshold,
                )
            )
            .order_by(LinkCheckerLink.last_check.is_not(None), LinkCheckerLink.last_check, LinkCheckerLink.id)
            .limit(limit)
            .all()
        )

    def check_due(self, limit: int = 50) -> int:
        """Check up to `limit` due links and commit the results; returns how many."""
        links = self.due_links(limit)
        for link in links:
            self.check_link(link)
        self.db.commit()
        return len(links)


__all__ = ["FetchResult", "LinkStatusChecker", "fetch_status"]
