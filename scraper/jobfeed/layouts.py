"""Known listing layouts and layout resolution.

A layout is pure data: a marker that fingerprints it plus, per logical field,
an ordered tuple of CSS lookups (first non-empty result wins). New variants are
added by appending a `SelectorSet` (or a YAML entry, see `load_layouts`), never
by touching the collection loop.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import yaml

from .surface import ActionOutcome, Surface

logger = logging.getLogger("layouts")


@dataclass(frozen=True)
class SelectorSet:
    name: str
    marker: str
    card: Tuple[str, ...]
    title: Tuple[str, ...]
    company: Tuple[str, ...] = ()
    location: Tuple[str, ...] = ()
    link: Tuple[str, ...] = ()
    description: Tuple[str, ...] = ()
    container: Tuple[str, ...] = ()
    job_id_attrs: Tuple[str, ...] = ()
    load_more: Tuple[str, ...] = ()
    detail: Optional["SelectorSet"] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectorSet":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown layout key '{key}' in layout {data.get('name')}")
                continue
            if key == "detail":
                kwargs[key] = cls.from_dict(value) if value else None
            elif key in ("name", "marker"):
                kwargs[key] = str(value)
            else:
                kwargs[key] = (value,) if isinstance(value, str) else tuple(value or ())
        return cls(**kwargs)


# Right-hand pane shown after clicking a card in the authenticated list, and
# the standalone /jobs/view/<id> page.
AUTHENTICATED_DETAIL = SelectorSet(
    name="authenticated_detail",
    marker=".jobs-search__job-details--wrapper, .job-view-layout",
    card=(".jobs-search__job-details--wrapper", ".job-view-layout"),
    title=(
        ".job-details-jobs-unified-top-card__job-title a",
        "h2.job-details-jobs-unified-top-card__job-title",
        "h1.job-details-jobs-unified-top-card__job-title",
        "div.job-details-jobs-unified-top-card__sticky-header-job-title span strong",
    ),
    company=(
        ".job-details-jobs-unified-top-card__company-name a",
        ".job-details-jobs-unified-top-card__company-name",
    ),
    location=(
        ".job-details-jobs-unified-top-card__primary-description-container",
        ".job-details-jobs-unified-top-card__primary-description",
    ),
    link=(".job-details-jobs-unified-top-card__job-title a",),
    job_id_attrs=("data-job-id",),
    description=(
        ".jobs-description-content__text",
        ".jobs-description__container",
        "#job-details",
    ),
)

AUTHENTICATED_LIST = SelectorSet(
    name="authenticated_list",
    marker=".scaffold-layout__list-container, .jobs-search-results-list",
    container=(".jobs-search-results-list", ".scaffold-layout__list-container", ".scaffold-layout__list"),
    card=(
        ".jobs-search-results__list-item",
        ".job-card-container",
        "li.occludable-update",
        "li[data-occludable-job-id]",
    ),
    title=(
        ".job-card-list__title--link strong",
        ".job-card-list__title",
        "a.job-card-container__link",
    ),
    company=(
        ".artdeco-entity-lockup__subtitle",
        ".job-card-container__primary-description",
    ),
    location=(
        ".job-card-container__metadata-item",
        ".artdeco-entity-lockup__caption",
    ),
    link=("a.job-card-container__link", "a.job-card-list__title--link", "a.job-card-list__title"),
    job_id_attrs=("data-job-id", "data-occludable-job-id"),
    load_more=("button[aria-label='View next page']", "button.jobs-search-pagination__button--next"),
    detail=AUTHENTICATED_DETAIL,
)

PUBLIC_LIST = SelectorSet(
    name="public_list",
    marker="ul.jobs-search__results-list",
    # the id-bearing div first; the li wrapper carries no data-entity-urn
    card=("div.base-search-card", "div.job-search-card", "ul.jobs-search__results-list > li"),
    title=("h3.base-search-card__title", ".base-search-card__title"),
    company=("h4.base-search-card__subtitle a", "h4.base-search-card__subtitle"),
    location=("span.job-search-card__location",),
    link=("a.base-card__full-link", "a.base-search-card__full-link", "a"),
    job_id_attrs=("data-entity-urn", "data-job-id", "data-id"),
    load_more=("button.infinite-scroller__show-more-button", "button[aria-label='See more jobs']"),
)

# Fixed priority order
LAYOUTS: Tuple[SelectorSet, ...] = (PUBLIC_LIST, AUTHENTICATED_LIST, AUTHENTICATED_DETAIL)


def resolve(surface: Surface, layouts: Sequence[SelectorSet] = LAYOUTS) -> Optional[SelectorSet]:
    """Return the first layout whose marker is rendered, or None (no known layout)."""
    for layout in layouts:
        if surface.query_one(layout.marker) is not None:
            return layout
    return None


def wait_for_layout(surface: Surface, timeout_ms: int, layouts: Sequence[SelectorSet] = LAYOUTS) -> Optional[SelectorSet]:
    """Bounded wait for any known marker. Expiry is not an error, it yields None."""
    union = ", ".join(layout.marker for layout in layouts)
    outcome = surface.wait_for(union, timeout_ms)
    if outcome is not ActionOutcome.OK:
        logger.info(f"No known listing layout after {timeout_ms}ms ({outcome.value})")
    return resolve(surface, layouts)


def load_layouts(path: Path, base: Sequence[SelectorSet] = LAYOUTS) -> Tuple[SelectorSet, ...]:
    """Prepend layouts declared in a YAML file to the built-in ones.

    Expected structure:

      layouts:
        - name: my_variant
          marker: div.results
          card: [div.results > article]
          title: [h2]
          company: [span.org]
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    extra: List[SelectorSet] = []
    for entry in data.get("layouts", []) or []:
        try:
            extra.append(SelectorSet.from_dict(entry))
        except TypeError as e:
            logger.warning(f"Skipping invalid layout {entry.get('name')}: {e}")
    if extra:
        logger.info(f"Loaded {len(extra)} layout(s) from {path}")
    return tuple(extra) + tuple(base)


__all__ = [
    "SelectorSet", "LAYOUTS", "PUBLIC_LIST", "AUTHENTICATED_LIST", "AUTHENTICATED_DETAIL",
    "resolve", "wait_for_layout", "load_layouts",
]
