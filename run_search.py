#!/usr/bin/env python3
"""Run one job search from the command line and print the postings."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobpipe.errors import AppError, log_error
from jobpipe.log import get_logger, set_level

log = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Search job sites and score postings.")
    parser.add_argument("keywords", nargs="+", help="search keywords")
    parser.add_argument("-l", "--location", default="Australia")
    parser.add_argument("--json", action="store_true", help="print postings as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on the console")
    args = parser.parse_args(argv)
    if args.verbose:
        set_level("DEBUG")

    from jobpipe.pipeline import JobPipeline

    with JobPipeline() as pipeline:
        try:
            jobs = pipeline.search_jobs(args.keywords, args.location)
        except AppError as err:
            log_error(err, keywords=args.keywords, location=args.location)
            return 1

        if args.json:
            print(json.dumps([j.to_dict() for j in jobs], indent=2))
        else:
            for job in sorted(jobs, key=lambda j: -j.match_score):
                print(f"[{job.match_score:3d}] {job.title} at {job.company} ({job.location}) [{job.source.value}]")
                print(f"       {job.url}")
        stats = pipeline.stats(jobs)
        log.info("Jobs found: %d, average match: %d", stats.total_jobs, stats.average_match_score)
    return 0


if __name__ == "__main__":
    sys.exit(main())
