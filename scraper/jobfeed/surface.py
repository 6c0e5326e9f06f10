"""Rendered-surface interface consumed by the collection engine.

The engine never touches a browser directly. Everything it needs (querying,
reading, scrolling, clicking, waiting) goes through an object implementing
`Surface`, passed in explicitly. Two implementations ship with the package:

  * `scraper.jobfeed.browser.PlaywrightSurface` wraps a Playwright sync `Page`.
  * `scraper.jobfeed.simulated.SimulatedSurface` renders an in-memory listing
    (tests, dry runs).

Element handles are opaque to the engine. Reads on a detached handle return
None; actions report an `ActionOutcome` instead of raising.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, List, Optional, Protocol, runtime_checkable


class ActionOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"  # recoverable: stale handle, element not interactable
    TIMEOUT = "timeout"

    @property
    def ok(self) -> bool:
        return self is ActionOutcome.OK


@runtime_checkable
class Surface(Protocol):
    def query(self, selector: str, within: Any = None) -> List[Any]:  # pragma: no cover - interface definition
        ...

    def query_one(self, selector: str, within: Any = None) -> Optional[Any]:  # pragma: no cover
        ...

    def text(self, element: Any) -> Optional[str]:  # pragma: no cover
        ...

    def attribute(self, element: Any, name: str) -> Optional[str]:  # pragma: no cover
        ...

    def scroll_into_view(self, element: Any) -> ActionOutcome:  # pragma: no cover
        ...

    def click(self, element: Any) -> ActionOutcome:  # pragma: no cover
        ...

    def wait_for(self, selector: str, timeout_ms: int) -> ActionOutcome:  # pragma: no cover
        ...

    def evaluate(self, expression: str, arg: Any = None) -> Any:  # pragma: no cover
        ...

    def scroll_to_bottom(self, within: Any = None) -> ActionOutcome:  # pragma: no cover
        ...

    def scroll_by(self, dy: int, within: Any = None) -> ActionOutcome:  # pragma: no cover
        ...

    def press(self, key: str) -> ActionOutcome:  # pragma: no cover
        ...

    def pause(self, ms: int) -> None:  # pragma: no cover
        ...


# Scalar progress probe: height of the scrollable results container (first
# matching selector) or of the document. Compared by equality only.
PROGRESS_SCRIPT = """(selectors) => {
    for (const sel of selectors || []) {
        const el = document.querySelector(sel);
        if (el) return el.scrollHeight;
    }
    return document.body ? document.body.scrollHeight : 0;
}"""

__all__ = ["ActionOutcome", "Surface", "PROGRESS_SCRIPT"]
