from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from .layouts import PUBLIC_LIST, SelectorSet
from .surface import PROGRESS_SCRIPT, ActionOutcome

FIELDS = ('title', 'company', 'location', 'link', 'description')


@dataclass(eq=False)
class SimElement:
    kind: str  # root | container | card | pane | field | button | idholder| container | card | pane | field | button
    job: Optional[Dict[str, Any]] = None
    field: Optional[str] = None

    @property
    def stale(self) -> bool:
        return bool(self.job and self.job.get('stale'))


def _parts(selector: str) -> List[str]:
    return [s.strip() for s in selector.split(',') if s.strip()]


def _field_map(layout: Optional[SelectorSet]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    if layout is None:
        return mapping
    for name in FIELDS:
        for sel in getattr(layout, name):
            mapping.setdefault(sel, name)
    return mapping


class SimulatedSurface:
    """Deterministic in-memory listing implementing the `Surface` protocol.

    Jobs are plain dicts (title, company, location, link, description, id,
    stale) grouped in batches. The first batch is rendered up front; every
    scroll / End key reveals the next one, or, with `load_more=True`, only a
    click on the "load more" button does. Once all batches are shown the
    progress signal stops changing. A job with `stale=True` behaves like a
    detached DOM node. With `layout=None` nothing recognizable is rendered.

    `id_within=True` renders cards as wrappers whose job id sits on a nested
    element as a URN (the public listing's `li > div[data-entity-urn]`).
    `pane_lag=N` keeps showing the previous job in the detail pane until N
    pauses have passed after a card click; a job with `pane_stuck=True` never
    replaces the pane content at all.
    """

    def __init__(self, batches: Sequence[Sequence[Dict[str, Any]]], layout: Optional[SelectorSet] = PUBLIC_LIST,
                 load_more: bool = False, card_height: int = 120, id_within: bool = False, pane_lag: int = 0):
        self.layout = layout
        self.batches = [list(b) for b in batches]
        self.revealed = 1 if self.batches else 0
        self.load_more = load_more
        self.card_height = card_height
        self.id_within = id_within
        self.pane_lag = pane_lag
        self.active: Optional[Dict[str, Any]] = None  # job shown in the detail pane
        self._pending: Optional[Dict[str, Any]] = None  # clicked job not yet rendered in the pane
        self._lag = 0
        self.advances = 0
        self.clicks = 0
        self.paused_ms = 0
        self._root = SimElement('root')
        self._container = SimElement('container')
        self._button = SimElement('button')
        self._cards: Dict[int, SimElement] = {}
        self._fields = _field_map(layout)
        self._detail = layout.detail if layout else None
        self._detail_fields = _field_map(self._detail)

    # --- helpers ---
    @property
    def rendered(self) -> List[Dict[str, Any]]:
        return [job for batch in self.batches[:self.revealed] for job in batch]

    @property
    def exhausted(self) -> bool:
        return self.revealed >= len(self.batches)

    def _reveal(self) -> None:
        self.advances += 1
        if not self.exhausted:
            self.revealed += 1

    def _card(self, job: Dict[str, Any]) -> SimElement:
        el = self._cards.get(id(job))
        if el is None:
            el = self._cards[id(job)] = SimElement('card', job)
        return el

    def _is_id_lookup(self, selector: str) -> bool:
        return selector in {f'[{attr}]' for attr in self.layout.job_id_attrs}

    def _is(self, selector: str, candidates: Sequence[str]) -> bool:
        known = {p for c in candidates for p in _parts(c)}
        return any(p in known for p in _parts(selector))

    def _settle_pane(self) -> None:
        if self._pending is not None and self._lag <= 0:
            self.active, self._pending = self._pending, None

    # --- Surface protocol ---
    def query(self, selector: str, within: Any = None) -> List[Any]:
        layout = self.layout
        if layout is None:
            return []
        if within is None:
            if self._is(selector, layout.card):
                return [self._card(job) for job in self.rendered]
            if self._detail and self.active is not None and self._is(selector, self._detail.card):
                return [SimElement('pane', self.active)]
            return []
        if within.kind == 'card' and self.id_within and self._is_id_lookup(selector):
            if within.stale or within.job.get('id') is None:
                return []
            return [SimElement('idholder', within.job)]
        if within.kind == 'card':
            name = self._fields.get(selector)
        elif within.kind == 'pane':
            name = self._detail_fields.get(selector)
        else:
            name = None
        if name and within.job.get(name):
            return [SimElement('field', within.job, name)]
        return []

    def query_one(self, selector: str, within: Any = None) -> Optional[Any]:
        layout = self.layout
        if within is None and layout is not None:
            if self._is(selector, [layout.marker]):
                return self._root
            if self._is(selector, layout.container):
                return self._container
            if self.load_more and not self.exhausted and self._is(selector, layout.load_more):
                return self._button
            if self._detail and self.active is not None and self._is(selector, [self._detail.marker]):
                return SimElement('pane', self.active)
        found = self.query(selector, within)
        return found[0] if found else None

    def text(self, element: Any) -> Optional[str]:
        if element.stale:
            return None
        if element.kind == 'field':
            return str(element.job.get(element.field) or '')
        if element.job:
            return str(element.job.get('title') or '')
        return ''

    def attribute(self, element: Any, name: str) -> Optional[str]:
        if element.stale or element.job is None:
            return None
        if element.kind == 'idholder' and name in self.layout.job_id_attrs:
            return f"urn:li:jobPosting:{element.job['id']}"
        if element.kind == 'card' and not self.id_within and self.layout and name in self.layout.job_id_attrs:
            value = element.job.get('id')
            return str(value) if value is not None else None
        if element.kind == 'field' and name == 'href':
            return element.job.get('link')
        return None

    def scroll_into_view(self, element: Any) -> ActionOutcome:
        return ActionOutcome.FAILED if element.stale else ActionOutcome.OK

    def click(self, element: Any) -> ActionOutcome:
        if element is None or element.stale:
            return ActionOutcome.FAILED
        self.clicks += 1
        if element.kind == 'button':
            self._reveal()
        elif element.kind == 'card' and not element.job.get('pane_stuck'):
            self._pending, self._lag = element.job, self.pane_lag
            self._settle_pane()
        return ActionOutcome.OK

    def wait_for(self, selector: str, timeout_ms: int) -> ActionOutcome:
        for part in _parts(selector):
            if self.query_one(part) is not None:
                return ActionOutcome.OK
        self.paused_ms += timeout_ms
        return ActionOutcome.TIMEOUT

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        if expression == PROGRESS_SCRIPT:
            return len(self.rendered) * self.card_height
        return None

    def scroll_to_bottom(self, within: Any = None) -> ActionOutcome:
        if not self.load_more:
            self._reveal()
        return ActionOutcome.OK

    def scroll_by(self, dy: int, within: Any = None) -> ActionOutcome:
        return self.scroll_to_bottom(within)

    def press(self, key: str) -> ActionOutcome:
        if key == 'End':
            return self.scroll_to_bottom()
        return ActionOutcome.OK

    def pause(self, ms: int) -> None:
        self.paused_ms += ms
        self._lag -= 1
        self._settle_pane()


def demo_batches(total: int, per_batch: int = 10, company: str = 'DemoCo', location: str = 'Remote') -> List[List[Dict[str, Any]]]:
    """Synthetic listing for dry runs: `total` distinct jobs split into batches."""
    jobs = [{
        'id': str(100000 + i),
        'title': f'Simulated Engineer {i}',
        'company': company,
        'location': location,
        'link': f'/jobs/view/{100000 + i}/?refId=demo',
    } for i in range(total)]
    return [jobs[i:i + per_batch] for i in range(0, total, per_batch)] or [[]]


__all__ = ['SimulatedSurface', 'SimElement', 'demo_batches']
