from pathlib import Path
import sys
import argparse
import logging

# Ensure project root is on path when executing this file directly
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scraper.jobfeed.collector import ListingCollector, collect_jobs
from scraper.jobfeed.exporter import export_records
from scraper.jobfeed.history import append_history
from scraper.jobfeed.logging_config import setup_logging, log_event
from scraper.jobfeed.settings import SETTINGS
from scraper.jobfeed.simulated import SimulatedSurface, demo_batches


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description='Collect job postings from an infinite-scroll listing')
    ap.add_argument('--keywords', type=str, default='', help='Search keywords')
    ap.add_argument('--location', type=str, default='', help='Search location')
    ap.add_argument('--limit', type=int, help=f'Target number of jobs (default {SETTINGS.default_target})')
    ap.add_argument('--output', type=Path, default=Path('scraper/data/jobs.json'), help='Export file (.json, .jsonl or .csv)')
    ap.add_argument('--history', type=Path, default=SETTINGS.history_path, help='Run history JSONL file')
    ap.add_argument('--cdp-url', type=str, default=SETTINGS.cdp_url, help='Chrome remote debugging endpoint to attach to')
    ap.add_argument('--headless', action='store_true', help='Run fallback browser headless')
    ap.add_argument('--abort-if-login', action='store_true', help='Abort immediately if login screen appears (non-interactive env)')
    ap.add_argument('--simulate', type=int, metavar='N', help='Dry run against a simulated listing of N jobs (no browser)')
    ap.add_argument('--debug', action='store_true', help='Enable debug logging')
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)
    logger = logging.getLogger('collector')
    if args.limit is not None and args.limit < 1:
        logger.error('--limit must be a positive integer')
        return 2
    if args.simulate is not None:
        logger.info(f'Simulated run over {args.simulate} jobs')
        collector = ListingCollector(SimulatedSurface(demo_batches(args.simulate)))
        jobs = collector.collect(args.limit)
        append_history(dict(collector.summary, keywords=args.keywords, location=args.location, simulated=True), args.history)
    else:
        if not args.keywords:
            logger.error('--keywords is required unless --simulate is given')
            return 2
        jobs = collect_jobs(args.keywords, args.location, limit=args.limit, headless=args.headless,
                            cdp_url=args.cdp_url, abort_if_login=args.abort_if_login, history_path=args.history)
    out = export_records(jobs, args.output)
    logger.info(f'Found {len(jobs)} jobs; wrote {out}')
    log_event('run_complete', collected=len(jobs), output=str(out))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
