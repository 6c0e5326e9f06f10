from __future__ import annotations
from typing import Any, Iterable, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit
import logging
import re

from .models import Candidate, JobRecord, clean_text
from .layouts import SelectorSet
from .surface import Surface

logger = logging.getLogger("extractor")

DEFAULT_ORIGIN = "https://www.linkedin.com"
# urn:li:jobPosting:3791234567 -> 3791234567
URN_ID_RGX = re.compile(r"^urn:li:[A-Za-z]+:(\d+)$")


def absolutize(link: Optional[str], base_origin: str = DEFAULT_ORIGIN) -> str:
    link = clean_text(link)
    if not link:
        return ""
    if link.startswith(("http://", "https://")):
        return link
    if link.startswith("//"):
        return f"{urlsplit(base_origin).scheme or 'https'}:{link}"
    return urljoin(base_origin.rstrip("/") + "/", link)


def normalize_link(link: Optional[str], base_origin: str = DEFAULT_ORIGIN) -> str:
    """Absolute scheme://host/path form of a link; query and fragment are dropped."""
    full = absolutize(link, base_origin)
    if not full:
        return ""
    try:
        parts = urlsplit(full)
    except ValueError:  # e.g. malformed IPv6 host
        return full
    if not parts.netloc:
        return full
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


def normalize_source_id(raw: Optional[str]) -> Optional[str]:
    value = clean_text(raw)
    if not value:
        return None
    m = URN_ID_RGX.match(value)
    return m.group(1) if m else value


def identity_key(record: JobRecord, source_id: Optional[str] = None, base_origin: str = DEFAULT_ORIGIN) -> str:
    """Dedup key: card id first, then normalized link, then title+company."""
    if source_id:
        return f"id:{source_id}"
    url = normalize_link(record.link, base_origin)
    if url:
        return f"url:{url}"
    return f"tc:{record.title.lower()}|{record.company.lower()}"


def first_text(surface: Surface, element: Any, selectors: Iterable[str]) -> str:
    for sel in selectors:
        node = surface.query_one(sel, within=element)
        if node is None:
            continue
        value = clean_text(surface.text(node))
        if value:
            return value
    return ""


def first_attr(surface: Surface, element: Any, selectors: Iterable[str], attr: str) -> str:
    for sel in selectors:
        node = surface.query_one(sel, within=element)
        if node is None:
            continue
        value = clean_text(surface.attribute(node, attr))
        if value:
            return value
    return ""


def read_source_id(surface: Surface, element: Any, selectors: SelectorSet) -> Optional[str]:
    """Stable job id from the element itself or, failing that, the first descendant carrying one.

    Public cards nest the id (`li > div.base-search-card[data-entity-urn]`), so
    the descendant lookup matters whenever the matched card is a wrapper.
    """
    for attr in selectors.job_id_attrs:
        value = normalize_source_id(surface.attribute(element, attr))
        if value:
            return value
    for attr in selectors.job_id_attrs:
        node = surface.query_one(f"[{attr}]", within=element)
        if node is None:
            continue
        value = normalize_source_id(surface.attribute(node, attr))
        if value:
            return value
    return None


def extract(surface: Surface, element: Any, selectors: SelectorSet, base_origin: str = DEFAULT_ORIGIN) -> Optional[Candidate]:
    """Read one card (or detail pane) into a Candidate.

    Returns None when the element cannot be brought into view (detached by a
    re-render) or carries no title. Missing optional fields become "".
    """
    if element is None:
        return None
    if not surface.scroll_into_view(element).ok:
        logger.debug(f"Element went stale before extraction ({selectors.name})")
        return None
    title = first_text(surface, element, selectors.title)
    if not title:
        return None
    description = first_text(surface, element, selectors.description) if selectors.description else ""
    record = JobRecord(
        title=title,
        company=first_text(surface, element, selectors.company),
        location=first_text(surface, element, selectors.location),
        link=absolutize(first_attr(surface, element, selectors.link, "href"), base_origin),
        description=description or None,
    )
    return Candidate(record=record, source_id=read_source_id(surface, element, selectors))


__all__ = [
    "absolutize", "normalize_link", "normalize_source_id", "identity_key",
    "first_text", "first_attr", "read_source_id", "extract", "clean_text",
]
