"""Browser session bootstrap and the Playwright-backed `Surface`.

Attaches to a Chrome already running with remote debugging (so an existing
LinkedIn login is reused), falling back to a persistent Chromium profile. All
Playwright exceptions stop here: `PlaywrightSurface` converts them into
`ActionOutcome` values or None reads so the collector never sees them.
"""
from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional
import logging
import time

from playwright.sync_api import (
    Browser, BrowserContext, ElementHandle, Page, sync_playwright,
    Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError,
)

from .logging_config import log_event
from .surface import ActionOutcome

logger = logging.getLogger('browser')

DEFAULT_PROFILE_DIR = Path(__file__).resolve().parent.parent / 'data' / 'browser_profile'
LOGIN_URL_HINTS = ('login', 'authwall', 'checkpoint', 'signup')
ACTION_TIMEOUT_MS = 3000


class BrowserUnavailable(RuntimeError):
    """Neither attaching over CDP nor launching a local browser worked."""


class PlaywrightSurface:
    def __init__(self, page: Page, action_timeout_ms: int = ACTION_TIMEOUT_MS):
        self.page = page
        self.action_timeout_ms = action_timeout_ms

    def query(self, selector: str, within: Optional[ElementHandle] = None) -> List[ElementHandle]:
        try:
            root = within or self.page
            return root.query_selector_all(selector)
        except PlaywrightError:
            return []

    def query_one(self, selector: str, within: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        try:
            root = within or self.page
            return root.query_selector(selector)
        except PlaywrightError:
            return None

    def text(self, element: ElementHandle) -> Optional[str]:
        try:
            return element.inner_text()
        except PlaywrightError:
            return None

    def attribute(self, element: ElementHandle, name: str) -> Optional[str]:
        try:
            return element.get_attribute(name)
        except PlaywrightError:
            return None

    def scroll_into_view(self, element: ElementHandle) -> ActionOutcome:
        try:
            element.scroll_into_view_if_needed(timeout=self.action_timeout_ms)
            return ActionOutcome.OK
        except PlaywrightTimeoutError:
            return ActionOutcome.TIMEOUT
        except PlaywrightError:
            return ActionOutcome.FAILED

    def click(self, element: ElementHandle) -> ActionOutcome:
        try:
            element.click(timeout=self.action_timeout_ms)
            return ActionOutcome.OK
        except PlaywrightTimeoutError:
            return ActionOutcome.TIMEOUT
        except PlaywrightError:
            return ActionOutcome.FAILED

    def wait_for(self, selector: str, timeout_ms: int) -> ActionOutcome:
        try:
            self.page.wait_for_selector(selector, timeout=timeout_ms, state='attached')
            return ActionOutcome.OK
        except PlaywrightTimeoutError:
            return ActionOutcome.TIMEOUT
        except PlaywrightError:
            return ActionOutcome.FAILED

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        try:
            return self.page.evaluate(expression, arg)
        except PlaywrightError:
            logger.debug("In-page evaluation failed", exc_info=True)
            return None

    def scroll_to_bottom(self, within: Optional[ElementHandle] = None) -> ActionOutcome:
        try:
            if within is not None:
                within.evaluate("el => { el.scrollTop = el.scrollHeight; }")
            else:
                self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
            return ActionOutcome.OK
        except PlaywrightError:
            return ActionOutcome.FAILED

    def scroll_by(self, dy: int, within: Optional[ElementHandle] = None) -> ActionOutcome:
        try:
            if within is not None:
                within.evaluate("(el, dy) => el.scrollBy(0, dy)", dy)
            else:
                self.page.mouse.wheel(0, dy)
            return ActionOutcome.OK
        except PlaywrightError:
            return ActionOutcome.FAILED

    def press(self, key: str) -> ActionOutcome:
        try:
            self.page.keyboard.press(key)
            return ActionOutcome.OK
        except PlaywrightError:
            return ActionOutcome.FAILED

    def pause(self, ms: int) -> None:
        try:
            self.page.wait_for_timeout(ms)
        except PlaywrightError:
            time.sleep(ms / 1000.0)


def find_listing_page(contexts: List[BrowserContext], host: str = 'linkedin.com') -> Optional[Page]:
    """Return an already-open tab on `host`, if any."""
    for context in contexts:
        for page in context.pages:
            if host in (page.url or ''):
                logger.info(f"Reusing existing tab {page.url}")
                return page
    return None


@contextmanager
def open_page(cdp_url: str, headless: bool = False, user_data_dir: Optional[Path] = None) -> Iterator[Page]:
    """Yield a page from an attached Chrome (CDP) or a freshly launched persistent profile."""
    with sync_playwright() as p:
        browser: Optional[Browser] = None
        context: Optional[BrowserContext] = None
        try:
            browser = p.chromium.connect_over_cdp(cdp_url)
            logger.info(f"Connected to existing Chrome at {cdp_url}")
            page = find_listing_page(browser.contexts)
            if page is None:
                ctx = browser.contexts[0] if browser.contexts else browser.new_context()
                page = ctx.pages[0] if ctx.pages else ctx.new_page()
            else:
                page.bring_to_front()
        except PlaywrightError as e:
            logger.warning(f"Could not attach over CDP ({e}); launching local browser")
            log_event('warn', stage='cdp_connect', message=str(e))
            profile = user_data_dir or DEFAULT_PROFILE_DIR
            profile.mkdir(parents=True, exist_ok=True)
            try:
                context = p.chromium.launch_persistent_context(str(profile), headless=headless)
            except PlaywrightError as launch_err:
                raise BrowserUnavailable(str(launch_err)) from launch_err
            page = context.pages[0] if context.pages else context.new_page()
        try:
            yield page
        finally:
            try:
                if context is not None:
                    context.close()
                if browser is not None:
                    browser.close()
            except PlaywrightError:
                logger.debug("Error while closing browser", exc_info=True)


def needs_login(page: Page) -> bool:
    url = (page.url or '').lower()
    return any(hint in url for hint in LOGIN_URL_HINTS)


def prepare_search(page: Page, url: str, abort_if_login: bool = False, login_wait_s: int = 300) -> bool:
    """Navigate to the search URL, waiting (bounded) for a manual login if redirected to one."""
    logger.info(f"Navigating to {url}")
    try:
        page.goto(url, wait_until='domcontentloaded', timeout=60000)
    except PlaywrightTimeoutError:
        logger.error("Navigation timeout (initial load)")
        log_event('error', stage='navigate_initial', message='timeout')
        return False
    except PlaywrightError as e:
        logger.error(f"Navigation failed: {e}")
        log_event('error', stage='navigate_initial', message=str(e))
        return False
    if not needs_login(page):
        return True
    if abort_if_login:
        logger.warning("Login required; aborting (abort_if_login=True)")
        log_event('login_abort')
        return False
    logger.warning(f"Login page detected. Please log in in the browser window (up to {login_wait_s}s)...")
    log_event('login_wait_start')
    try:
        page.wait_for_url(lambda u: not any(h in u.lower() for h in LOGIN_URL_HINTS), timeout=login_wait_s * 1000)
    except PlaywrightTimeoutError:
        logger.error("Login not completed within timeout.")
        log_event('error', stage='login_wait', message='timeout')
        return False
    logger.info("Login completed; reloading search")
    log_event('login_wait_complete')
    try:
        page.goto(url, wait_until='domcontentloaded', timeout=60000)
    except PlaywrightError as e:
        logger.error(f"Navigation after login failed: {e}")
        return False
    return True


__all__ = ['BrowserUnavailable', 'PlaywrightSurface', 'find_listing_page', 'open_page', 'needs_login', 'prepare_search']
