from __future__ import annotations
"""
Incremental listing collector.

Reads whatever job cards are rendered, extracts and deduplicates them, and
advances the listing (scroll, End key, "load more" click) only when a full pass
over the rendered cards admitted nothing new. Stops when the target count is
reached or the progress signal stops changing for `threshold` advance cycles.
A short result is a normal outcome, not an error.

IMPORTANT: Automated collection from LinkedIn may violate their Terms of Service.
Use at your own risk. Keep volume low and prefer the public listing.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set
from urllib.parse import urlencode
import logging
import time

from .convergence import ConvergenceDetector, Progress
from .dedupe import Admission, DeduplicationIndex
from .extractor import extract, identity_key, normalize_link, read_source_id
from .logging_config import log_event
from .models import Candidate, JobRecord
from .layouts import LAYOUTS, SelectorSet, load_layouts, resolve, wait_for_layout
from .settings import SETTINGS, Settings
from .surface import PROGRESS_SCRIPT, Surface

logger = logging.getLogger('collector')

STOP_TARGET = 'target_reached'
STOP_CONVERGED = 'converged'
STOP_MAX_CYCLES = 'max_cycles'

# pane reads per clicked card before falling back to the card fields
DETAIL_ATTEMPTS = 2


class SurfaceNotReady(RuntimeError):
    """Collector invoked without a rendered surface to read from."""


def build_search_url(keywords: str, location: str, base_origin: str = 'https://www.linkedin.com') -> str:
    params = {}
    if keywords:
        params['keywords'] = keywords
    if location:
        params['location'] = location
    query = urlencode(params)
    return f"{base_origin.rstrip('/')}/jobs/search?{query}" if query else f"{base_origin.rstrip('/')}/jobs/search"


@dataclass
class CollectionState:
    records: List[JobRecord] = field(default_factory=list)  # discovery order
    index: DeduplicationIndex = field(default_factory=DeduplicationIndex)
    exhausted: Set[str] = field(default_factory=set)  # card ids already read
    idle_cycles: int = 0
    cycles: int = 0
    scanned: int = 0
    duplicates: int = 0
    unextractable: int = 0

    def summary(self) -> Dict[str, Any]:
        return {
            'collected': len(self.records),
            'keys_admitted': len(self.index),
            'cycles': self.cycles,
            'idle_cycles': self.idle_cycles,
            'scanned': self.scanned,
            'duplicates': self.duplicates,
            'unextractable': self.unextractable,
        }


class ListingCollector:
    """Drives one collection run over a rendered listing surface."""

    def __init__(self, surface: Optional[Surface], settings: Optional[Settings] = None, layouts: Optional[Sequence[SelectorSet]] = None):
        self.surface = surface
        self.settings = settings or SETTINGS
        if layouts is None:
            layouts = LAYOUTS
            if self.settings.layouts_file:
                layouts = load_layouts(self.settings.layouts_file)
        self.layouts = tuple(layouts)
        self.detector = ConvergenceDetector(self.settings.stall_threshold_scroll)
        self.layout: Optional[SelectorSet] = None
        self.stop_reason: Optional[str] = None
        self.summary: Dict[str, Any] = {}

    # --- layout / surface probes ---
    def _current_layout(self) -> Optional[SelectorSet]:
        if self.layout is not None and self.surface.query_one(self.layout.marker) is not None:
            return self.layout
        layout = resolve(self.surface, self.layouts)
        if layout is not self.layout:
            logger.info(f"Listing layout: {layout.name if layout else 'none'}")
            log_event('layout_resolved', layout=layout.name if layout else None)
        self.layout = layout
        return layout

    def _first(self, selectors: Sequence[str]) -> Optional[Any]:
        for sel in selectors:
            node = self.surface.query_one(sel)
            if node is not None:
                return node
        return None

    def _cards(self, layout: SelectorSet) -> List[Any]:
        for sel in layout.card:
            found = self.surface.query(sel)
            if found:
                return found
        return []

    def _progress(self) -> Any:
        layout = self.layout
        containers = list(layout.container) if layout else []
        height = self.surface.evaluate(PROGRESS_SCRIPT, containers)
        if isinstance(height, (int, float)):
            return height
        return len(self._cards(layout)) if layout else 0

    # --- Scanning ---
    def _same_job(self, card: Optional[Candidate], card_id: Optional[str], pane: Candidate) -> bool:
        """Whether the detail pane shows the clicked card rather than a leftover job."""
        if card_id and pane.source_id:
            return card_id == pane.source_id
        if card is None:
            return False
        origin = self.settings.base_origin
        card_link = normalize_link(card.record.link, origin)
        pane_link = normalize_link(pane.record.link, origin)
        if card_link and pane_link:
            return card_link == pane_link
        return card.record.title.casefold() == pane.record.title.casefold()

    def _read_candidate(self, card: Any, layout: SelectorSet, card_id: Optional[str] = None) -> Optional[Candidate]:
        origin = self.settings.base_origin
        candidate = extract(self.surface, card, layout, origin)
        if layout.detail is None or not self.settings.open_details:
            return candidate
        # Authenticated list: open the card to read the detail pane
        if not self.surface.click(card).ok:
            return candidate
        # the pane wrapper stays rendered between clicks, so wait on its content
        for _ in range(DETAIL_ATTEMPTS):
            self.surface.wait_for(layout.detail.marker, self.settings.detail_timeout_ms)
            self.surface.pause(self.settings.detail_settle_ms)
            pane = self._first(layout.detail.card)
            detail = extract(self.surface, pane, layout.detail, origin) if pane is not None else None
            if detail is not None and self._same_job(candidate, card_id, detail):
                return detail if candidate is None else candidate.filled_from(detail)
        title = candidate.record.title if candidate else None
        logger.debug(f"Detail pane did not switch to card {card_id or title}; keeping card fields only")
        log_event('detail_mismatch', card_id=card_id, title=title)
        return candidate

    def _scan(self, state: CollectionState, target: int) -> int:
        layout = self._current_layout()
        if layout is None:
            logger.debug("No known layout rendered; nothing to scan this pass")
            return 0
        admitted = 0
        for card in self._cards(layout):
            if len(state.records) >= target:
                break
            card_id = read_source_id(self.surface, card, layout)
            if card_id and card_id in state.exhausted:
                continue
            state.scanned += 1
            candidate = self._read_candidate(card, layout, card_id)
            if candidate is None:
                state.unextractable += 1
                continue
            if card_id:
                state.exhausted.add(card_id)
            key = identity_key(candidate.record, candidate.source_id or card_id, self.settings.base_origin)
            if state.index.admit(key) is Admission.DUPLICATE:
                state.duplicates += 1
                continue
            job = candidate.record
            state.records.append(job)
            state.idle_cycles = 0
            self.detector.mark_progress()
            admitted += 1
            logger.info(f"+ Scraped: {job.title} at {job.company}")
            log_event('job_extracted', key=key, title=job.title, company=job.company, layout=layout.name)
        return admitted

    # --- Advancing ---
    def _advance(self) -> str:
        layout = self.layout
        method = 'none'
        container = self._first(layout.container) if layout else None
        if self.surface.scroll_to_bottom(container).ok:
            method = 'scroll'
        elif self.surface.press('End').ok:
            method = 'key'
        button = self._first(layout.load_more) if layout else None
        if button is not None and self.surface.click(button).ok:
            method = 'load_more'
            # click-triggered loads settle slower
            self.detector.threshold = max(self.detector.threshold, self.settings.stall_threshold_load_more)
        self.surface.pause(self.settings.settle_ms)
        return method

    def collect(self, target: Optional[int] = None) -> List[JobRecord]:
        if self.surface is None:
            raise SurfaceNotReady("No surface provider; open a browser page before collecting")
        target = self.settings.default_target if target is None else int(target)
        if target < 1:
            raise ValueError("target must be a positive integer")
        state = CollectionState()
        self.layout = None
        self.stop_reason = None
        self.detector = ConvergenceDetector(self.settings.stall_threshold_scroll)
        start = time.time()
        logger.info(f"Starting collection target={target}")
        log_event('collect_start', target=target)

        wait_for_layout(self.surface, self.settings.marker_timeout_ms, self.layouts)
        self._current_layout()
        self.detector.prime(self._progress())
        while True:
            if self._scan(state, target):
                if len(state.records) >= target:
                    self.stop_reason = STOP_TARGET
                    break
                continue  # rescan until a pass admits nothing
            if state.cycles >= self.settings.max_cycles:
                self.stop_reason = STOP_MAX_CYCLES
                break
            method = self._advance()
            state.cycles += 1
            state.idle_cycles += 1
            signal = self._progress()
            outcome = self.detector.observe(signal)
            logger.debug(f"Advance cycle {state.cycles} via {method}: signal={signal} {outcome.value} stalls={self.detector.stalls}/{self.detector.threshold} collected={len(state.records)}")
            if outcome is Progress.STALLED and self.detector.should_stop():
                self.stop_reason = STOP_CONVERGED
                break

        elapsed = round(time.time() - start, 2)
        self.summary = dict(state.summary(), target=target, stop_reason=self.stop_reason, elapsed_s=elapsed,
                            layout=self.layout.name if self.layout else None)
        logger.info(f"Completed collection: collected={len(state.records)}/{target} stop={self.stop_reason} cycles={state.cycles} elapsed={elapsed}s")
        log_event('collect_complete', **self.summary)
        return list(state.records)


def collect_jobs(keywords: str, location: str, limit: Optional[int] = None, headless: bool = False,
                 cdp_url: Optional[str] = None, user_data_dir: Optional[Path] = None,
                 abort_if_login: bool = False, settings: Optional[Settings] = None,
                 history_path: Optional[Path] = None) -> List[JobRecord]:
    """Open (or attach to) a browser, run one search and collect up to `limit` jobs."""
    # Playwright is heavy to import; only load it when actually collecting.
    from .browser import BrowserUnavailable, PlaywrightSurface, open_page, prepare_search
    from .history import append_history
    settings = settings or SETTINGS
    url = build_search_url(keywords, location, settings.base_origin)
    log_event('search_start', keywords=keywords, location=location, limit=limit, headless=headless)
    try:
        with open_page(cdp_url or settings.cdp_url, headless=headless, user_data_dir=user_data_dir) as page:
            if not prepare_search(page, url, abort_if_login=abort_if_login):
                return []
            collector = ListingCollector(PlaywrightSurface(page), settings)
            jobs = collector.collect(limit)
    except BrowserUnavailable as e:
        logger.error(f"Failed to open browser: {e}")
        log_event('error', stage='launch', message=str(e))
        return []
    if history_path is not None:
        append_history(dict(collector.summary, keywords=keywords, location=location), history_path)
    return jobs


__all__ = [
    'ListingCollector', 'CollectionState', 'SurfaceNotReady', 'build_search_url', 'collect_jobs',
    'STOP_TARGET', 'STOP_CONVERGED', 'STOP_MAX_CYCLES',
]
