import json
from scraper.scripts.run_collect import main
from scraper.jobfeed.history import read_history


def test_simulated_run_exports_and_records_history(tmp_path):
    out = tmp_path / 'jobs.json'
    hist = tmp_path / 'history.jsonl'
    code = main(['--simulate', '12', '--limit', '5', '--output', str(out), '--history', str(hist)])
    assert code == 0
    data = json.loads(out.read_text(encoding='utf-8'))
    assert len(data) == 5
    assert data[0]['link'] == 'https://www.linkedin.com/jobs/view/100000/?refId=demo'
    runs = read_history(hist)
    assert runs[-1]['collected'] == 5
    assert runs[-1]['stop_reason'] == 'target_reached'
    assert runs[-1]['simulated'] is True


def test_live_run_requires_keywords(tmp_path):
    assert main(['--output', str(tmp_path / 'x.json')]) == 2


def test_limit_must_be_positive(tmp_path):
    assert main(['--simulate', '3', '--limit', '0', '--output', str(tmp_path / 'x.json')]) == 2
