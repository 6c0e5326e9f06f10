from scraper.jobfeed.layouts import (
    AUTHENTICATED_DETAIL, AUTHENTICATED_LIST, LAYOUTS, PUBLIC_LIST, SelectorSet, load_layouts, resolve, wait_for_layout,
)
from scraper.jobfeed.simulated import SimulatedSurface


def test_priority_order_is_fixed():
    assert [l.name for l in LAYOUTS] == ['public_list', 'authenticated_list', 'authenticated_detail']
    assert AUTHENTICATED_LIST.detail is AUTHENTICATED_DETAIL


def test_resolve_public_listing(job_factory):
    surface = SimulatedSurface([[job_factory(0)]], layout=PUBLIC_LIST)
    assert resolve(surface) is PUBLIC_LIST


def test_resolve_authenticated_list(job_factory):
    surface = SimulatedSurface([[job_factory(0)]], layout=AUTHENTICATED_LIST)
    assert resolve(surface) is AUTHENTICATED_LIST


def test_resolve_standalone_detail_pane(job_factory):
    surface = SimulatedSurface([[job_factory(0)]], layout=AUTHENTICATED_DETAIL)
    assert resolve(surface) is AUTHENTICATED_DETAIL


def test_no_known_layout_is_not_an_error():
    surface = SimulatedSurface([[]], layout=None)
    assert resolve(surface) is None
    assert wait_for_layout(surface, timeout_ms=500) is None
    assert surface.paused_ms == 500


def test_from_dict_coerces_strings_to_tuples():
    s = SelectorSet.from_dict({'name': 'x', 'marker': 'div.r', 'card': 'div.r > article', 'title': ['h2', 'h3'], 'bogus': 1})
    assert s.card == ('div.r > article',)
    assert s.title == ('h2', 'h3')
    assert s.company == ()


def test_load_layouts_prepends_yaml_variants(tmp_path):
    cfg = tmp_path / 'layouts.yml'
    cfg.write_text(
        "layouts:\n"
        "  - name: board_variant\n"
        "    marker: section.board\n"
        "    card: [section.board article]\n"
        "    title: [h2]\n"
        "    company: [span.org]\n",
        encoding='utf-8',
    )
    layouts = load_layouts(cfg)
    assert layouts[0].name == 'board_variant'
    assert layouts[1:] == LAYOUTS


def test_yaml_layout_is_usable_by_simulated_surface(tmp_path, job_factory):
    custom = SelectorSet.from_dict({'name': 'custom', 'marker': 'section.board', 'card': ['section.board article'], 'title': ['h2']})
    surface = SimulatedSurface([[job_factory(0)]], layout=custom)
    assert resolve(surface, (custom,) + LAYOUTS) is custom
    assert resolve(surface) is None


def test_public_cards_match_the_id_bearing_element():
    assert PUBLIC_LIST.card[0] == 'div.base-search-card'
    assert 'data-entity-urn' in PUBLIC_LIST.job_id_attrs
