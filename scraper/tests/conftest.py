"""Global pytest fixtures.
 - Sets env vars to disable logging side effects.
 - Provides zero-wait settings and small synthetic listings for collector tests.
"""
from __future__ import annotations
import os
from dataclasses import replace
import pytest
import sys, pathlib
# Add project root to sys.path for tests
ROOT = pathlib.Path(__file__).resolve().parents[2]  # points to project root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scraper.jobfeed.settings import load_settings


@pytest.fixture(autouse=True, scope="session")
def test_env_setup():
    os.environ.setdefault('SCRAPER_DISABLE_FILE_LOGS', '1')
    os.environ.setdefault('SCRAPER_DISABLE_EVENTS', '1')
    yield
    # teardown not required


@pytest.fixture
def fast_settings(tmp_path):
    return replace(
        load_settings(),
        base_origin='https://www.linkedin.com',
        default_target=25,
        settle_ms=0,
        detail_settle_ms=0,
        marker_timeout_ms=0,
        detail_timeout_ms=0,
        stall_threshold_scroll=3,
        stall_threshold_load_more=5,
        max_cycles=50,
        open_details=True,
        layouts_file=None,
        history_path=tmp_path / 'history.jsonl',
    )


def make_job(i, **overrides):
    job = {
        'id': str(1000 + i),
        'title': f'Engineer {i}',
        'company': 'Acme',
        'location': 'Madrid, Spain',
        'link': f'/jobs/view/{1000 + i}/?trk=public_jobs',
    }
    job.update(overrides)
    return job


@pytest.fixture
def job_factory():
    return make_job
