"""Minimal runner for the view tracker.

Usage: python run_tracker.py --db viewCounter.db --interval 60 --simulate 1.2.3.4:home

Recovers any existing store, starts background flushing and blocks until
interrupted. ``--simulate`` records views (``ip:page``) after startup, which
is handy for smoke-testing a store file.
"""
import argparse
import json
import logging
import time

from viewcounter import ViewTracker, build_store_factory
from viewcounter.persistence import metrics

parser = argparse.ArgumentParser(description='Run the in-process view tracker against a store file')
parser.add_argument('--db', help='Store path (default: VIEWCOUNTER_DB_PATH or viewCounter.db)', default=None)
parser.add_argument('--kind', help='Store backend: sqlite or memory', default=None)
parser.add_argument('--interval', type=float, help='Flush interval in seconds', default=None)
parser.add_argument('--simulate', action='append', default=[], help='Record a view, given as ip:page (repeatable)')
parser.add_argument('--once', action='store_true', help='Flush once and exit instead of blocking')
args = parser.parse_args()

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s %(message)s')

tracker = ViewTracker(build_store_factory(args.kind, args.db), interval=args.interval)
report = tracker.start()
print(f"Recovered {report.pages_restored} pages, {report.visitors_restored} visitors (first_run={report.first_run})")

for item in args.simulate:
	ip, _, page = item.partition(':')
	tracker.record_view(ip, page or '/')

try:
	if args.once:
		tracker.flush()
	else:
		while True:
			time.sleep(1)
except KeyboardInterrupt:
	print("\nstopping...")
finally:
	tracker.stop(final_flush=True)
	print(json.dumps(metrics.snapshot(), indent=2))
