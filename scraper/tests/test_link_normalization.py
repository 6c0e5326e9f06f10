from hypothesis import given, strategies as st, settings
from scraper.jobfeed.extractor import absolutize, identity_key, normalize_link, normalize_source_id
from scraper.jobfeed.models import JobRecord

ORIGIN = 'https://www.linkedin.com'

segment = st.text(alphabet='abcdefghijklmnopqrstuvwxyz0123456789-_', min_size=1, max_size=12)
paths = st.lists(segment, min_size=0, max_size=5).map(lambda parts: '/' + '/'.join(parts))
queries = st.one_of(st.just(''), st.lists(segment, min_size=1, max_size=3).map(lambda ps: '?' + '&'.join(f'{p}={p}' for p in ps)))
fragments = st.one_of(st.just(''), segment.map(lambda s: '#' + s))
hosts = st.sampled_from(['https://www.linkedin.com', 'https://es.linkedin.com', 'http://example.org', ''])
links = st.builds(lambda h, p, q, f: h + p + q + f, hosts, paths, queries, fragments)


@given(links)
@settings(max_examples=80, deadline=None)
def test_normalize_link_idempotent(link):
    once = normalize_link(link, ORIGIN)
    assert normalize_link(once, ORIGIN) == once


@given(links)
@settings(max_examples=60, deadline=None)
def test_normalize_link_strips_query_and_fragment(link):
    out = normalize_link(link, ORIGIN)
    assert '?' not in out
    assert '#' not in out
    assert out.startswith(('https://', 'http://'))


@given(paths, queries)
@settings(max_examples=40, deadline=None)
def test_relative_links_resolve_to_origin(path, query):
    assert normalize_link(path + query, ORIGIN) == ORIGIN + path


def test_absolutize_keeps_query_for_display():
    assert absolutize('/jobs/view/123/?refId=abc', ORIGIN) == 'https://www.linkedin.com/jobs/view/123/?refId=abc'
    assert absolutize('https://x.example/jobs/1', ORIGIN) == 'https://x.example/jobs/1'
    assert absolutize('', ORIGIN) == ''
    assert absolutize(None, ORIGIN) == ''


def test_normalize_link_examples():
    assert normalize_link('https://www.linkedin.com/jobs/view/3791234567/?refId=x&trackingId=y', ORIGIN) == \
        'https://www.linkedin.com/jobs/view/3791234567/'
    assert normalize_link('jobs/view/1', ORIGIN) == 'https://www.linkedin.com/jobs/view/1'
    assert normalize_link('//www.linkedin.com/jobs/view/2?x=1', ORIGIN) == 'https://www.linkedin.com/jobs/view/2'


def test_source_id_urn_is_reduced_to_number():
    assert normalize_source_id('urn:li:jobPosting:3791234567') == '3791234567'
    assert normalize_source_id(' 42 ') == '42'
    assert normalize_source_id('') is None
    assert normalize_source_id(None) is None


def test_identity_key_priority_job_id_first():
    rec = JobRecord(title='Data Engineer', company='Acme', link='/jobs/view/9/?a=b')
    assert identity_key(rec, '9', ORIGIN) == 'id:9'
    assert identity_key(rec, None, ORIGIN) == 'url:https://www.linkedin.com/jobs/view/9/'
    bare = JobRecord(title='Data Engineer', company='Acme')
    assert identity_key(bare, None, ORIGIN) == 'tc:data engineer|acme'


def test_identity_key_ignores_tracking_query():
    a = JobRecord(title='A', link='https://www.linkedin.com/jobs/view/7/?trk=1')
    b = JobRecord(title='A (dup)', link='https://www.linkedin.com/jobs/view/7/?trk=2')
    assert identity_key(a, None, ORIGIN) == identity_key(b, None, ORIGIN)
