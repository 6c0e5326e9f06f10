from types import SimpleNamespace
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from scraper.jobfeed.browser import PlaywrightSurface, find_listing_page, needs_login, prepare_search
from scraper.jobfeed.surface import ActionOutcome, Surface


class DetachedHandle:
    """Element handle whose node was removed by a re-render."""

    def _gone(self, *a, **k):
        raise PlaywrightError('Element is not attached to the DOM')

    inner_text = get_attribute = click = evaluate = query_selector = query_selector_all = _gone

    def scroll_into_view_if_needed(self, timeout=None):
        raise PlaywrightTimeoutError('Timeout 3000ms exceeded.')


class LiveHandle:
    def __init__(self, text='Engineer', attrs=None):
        self._text = text
        self._attrs = attrs or {}
        self.clicked = 0

    def inner_text(self):
        return self._text

    def get_attribute(self, name):
        return self._attrs.get(name)

    def scroll_into_view_if_needed(self, timeout=None):
        return None

    def click(self, timeout=None):
        self.clicked += 1


class FakePage:
    def __init__(self, url='https://www.linkedin.com/jobs/search'):
        self.url = url
        self.waited = []
        self.keyboard = SimpleNamespace(press=lambda key: None)

    def query_selector(self, selector):
        return LiveHandle() if selector == 'h3' else None

    def query_selector_all(self, selector):
        raise PlaywrightError('Execution context was destroyed')

    def wait_for_selector(self, selector, timeout=None, state=None):
        raise PlaywrightTimeoutError('Timeout exceeded')

    def evaluate(self, expression, arg=None):
        return 4200

    def wait_for_timeout(self, ms):
        self.waited.append(ms)


def test_surface_satisfies_protocol():
    assert isinstance(PlaywrightSurface(FakePage()), Surface)


def test_stale_handle_reads_return_none_and_actions_fail():
    surface = PlaywrightSurface(FakePage())
    el = DetachedHandle()
    assert surface.text(el) is None
    assert surface.attribute(el, 'data-job-id') is None
    assert surface.click(el) is ActionOutcome.FAILED
    assert surface.scroll_into_view(el) is ActionOutcome.TIMEOUT
    assert surface.scroll_to_bottom(el) is ActionOutcome.FAILED
    assert surface.query('span', within=el) == []
    assert surface.query_one('span', within=el) is None


def test_page_level_errors_are_folded():
    page = FakePage()
    surface = PlaywrightSurface(page)
    assert surface.query('li') == []
    assert surface.wait_for('ul.jobs-search__results-list', 10) is ActionOutcome.TIMEOUT
    assert surface.evaluate('() => 1') == 4200
    assert surface.press('End') is ActionOutcome.OK
    surface.pause(250)
    assert page.waited == [250]


def test_live_handle_roundtrip():
    surface = PlaywrightSurface(FakePage())
    el = LiveHandle(attrs={'data-job-id': '42'})
    assert surface.text(el) == 'Engineer'
    assert surface.attribute(el, 'data-job-id') == '42'
    assert surface.click(el) is ActionOutcome.OK
    assert el.clicked == 1
    assert surface.query_one('h3') is not None


def test_find_listing_page_prefers_existing_tab():
    other = SimpleNamespace(url='https://news.example.com/')
    jobs = SimpleNamespace(url='https://www.linkedin.com/jobs/search?keywords=x')
    contexts = [SimpleNamespace(pages=[other]), SimpleNamespace(pages=[jobs])]
    assert find_listing_page(contexts) is jobs
    assert find_listing_page([SimpleNamespace(pages=[other])]) is None


def test_needs_login_from_url():
    assert needs_login(FakePage('https://www.linkedin.com/login?session_redirect=x'))
    assert needs_login(FakePage('https://www.linkedin.com/authwall?trk=x'))
    assert not needs_login(FakePage('https://www.linkedin.com/jobs/search?keywords=x'))


class NavPage(FakePage):
    """Page whose navigation lands on `landing` and whose login wait may time out."""

    def __init__(self, landing, login_completes=True):
        super().__init__('about:blank')
        self.landing = landing
        self.login_completes = login_completes
        self.visits = []

    def goto(self, url, wait_until=None, timeout=None):
        self.visits.append(url)
        self.url = self.landing

    def wait_for_url(self, predicate, timeout=None):
        if not self.login_completes:
            raise PlaywrightTimeoutError('Timeout exceeded')
        self.url = self.landing = 'https://www.linkedin.com/jobs/search?keywords=x'


SEARCH = 'https://www.linkedin.com/jobs/search?keywords=x'


def test_prepare_search_without_login():
    page = NavPage(SEARCH)
    assert prepare_search(page, SEARCH)
    assert page.visits == [SEARCH]


def test_prepare_search_aborts_on_login_wall():
    page = NavPage('https://www.linkedin.com/authwall?trk=x')
    assert not prepare_search(page, SEARCH, abort_if_login=True)


def test_prepare_search_waits_for_login_then_reloads():
    page = NavPage('https://www.linkedin.com/login')
    assert prepare_search(page, SEARCH, login_wait_s=1)
    assert page.visits == [SEARCH, SEARCH]


def test_prepare_search_gives_up_when_login_times_out():
    page = NavPage('https://www.linkedin.com/login', login_completes=False)
    assert not prepare_search(page, SEARCH, login_wait_s=1)
