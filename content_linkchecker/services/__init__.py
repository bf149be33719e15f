"""Link extraction, classification, clean-up and liveness services."""

from .html_link_extractor import EXTRACTORS, UnknownExtractor, extract_html_links, get_extractor
from .link_clean_up import LinkCleanUp, RemoveAllBatch
from .link_extractor_service import LinkExtractorService
from .link_status import FetchResult, LinkStatusChecker, fetch_status
from .url_classifier import Classification, InvalidUrl, LinkType, classify
from .url_resolver import resolve

__all__ = [
    "Classification",
    "EXTRACTORS",
    "FetchResult",
    "InvalidUrl",
    "LinkCleanUp",
    "LinkExtractorService",
    "LinkStatusChecker",
    "LinkType",
    "RemoveAllBatch",
    "UnknownExtractor",
    "classify",
    "extract_html_links",
    "fetch_status",
    "get_extractor",
    "resolve",
]
