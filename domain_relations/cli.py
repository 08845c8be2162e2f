# -*- coding: utf-8 -*-
"""
related-domains — discover TLD variants and redirect aliases of a seed list.

Usage (examples):
  related-domains --input domains.txt --output-csv results.csv
  related-domains --input domains.txt --parallel --dry-run
  related-domains --input domains.txt --add-matches --explain example.se

Seed file: one domain per line; '#' comments and blank lines are skipped
(commented domains still count as known when adding matches).
"""

import argparse
import logging
import sys
import time
from functools import partial
from typing import List, Optional

from . import VERSION
from .engine import Discovery
from .fingerprint import DnsCache, FingerprintService
from .hosts import canonical
from .matches import SeedFileError, collect_matches, new_matches, persist_matches, read_seed_file
from .probe import DEFAULT_TIMEOUT, RedirectProbe
from .report import explain_lines, format_matches, write_results_csv
from .workers import run_parallel, run_worker

LOG = logging.getLogger("related_domains")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="related-domains",
        description=f"Related domain discovery {VERSION}",
    )
    ap.add_argument("--input", dest="infile", help="Seed file: one domain per line")
    ap.add_argument("--output-csv", help="Write every variant result to this CSV")
    ap.add_argument("--timeout-seconds", type=float, default=DEFAULT_TIMEOUT,
                    help="HTTP timeout per request (seconds)")
    ap.add_argument("--parallel", action="store_true",
                    help="Run the seed round with one worker process per domain")
    ap.add_argument("--add-matches", action="store_true", help="Append new matches to the seed file")
    ap.add_argument("--prompt-add-matches", action="store_true",
                    help="Ask before appending new matches to the seed file")
    ap.add_argument("--dry-run", action="store_true", help="Report what would be added; write nothing")
    ap.add_argument("--insecure", action="store_true", help="Skip TLS verification on HTTP probes")
    ap.add_argument("--debug", action="store_true", help="Verbose debug logging")
    ap.add_argument("--explain", nargs="*", help="Print the variant trace for these base domain(s)")
    ap.add_argument("--worker-domain", help=argparse.SUPPRESS)
    ap.add_argument("--worker-output", help=argparse.SUPPRESS)
    return ap


def setup_logging(debug: bool):
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO,
                        format="%(levelname)s: %(message)s")
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.debug)

    if args.worker_domain:
        if not args.worker_output:
            ap.error("--worker-domain requires --worker-output")
        return run_worker(args.worker_domain, args.worker_output,
                          timeout=args.timeout_seconds, insecure=args.insecure)
    if not args.infile:
        ap.error("--input is required")

    print(f"[Related Domains] {VERSION}")

    try:
        seeds = read_seed_file(args.infile)
    except SeedFileError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 2
    if not seeds:
        print("No domains found in seed file.", file=sys.stderr)
        return 2

    started = time.time()
    fingerprints = FingerprintService(cache=DnsCache())
    with RedirectProbe(timeout=args.timeout_seconds, verify=not args.insecure) as prober:
        engine = Discovery(
            fingerprints, prober, timeout=args.timeout_seconds,
            parallel_runner=partial(run_parallel, insecure=args.insecure, debug=args.debug),
        )
        result = engine.discover(seeds, parallel=args.parallel)

    LOG.info("Probed %d domain(s), %d variant row(s) in %.1fs",
             len(result.tested), len(result.rows), time.time() - started)

    if args.output_csv:
        write_results_csv(args.output_csv, result.rows)
        print(f"Wrote: {args.output_csv}")

    for base in args.explain or []:
        print("\n".join(explain_lines(canonical(base), result.rows)))

    records = collect_matches(result.rows, result.seeds, result.frontier)
    try:
        additions = new_matches(records, args.infile)
    except SeedFileError as e:
        LOG.error("%s", e)
        return 1

    print(f"\nMatches: {len(records)} related domain(s), {len(additions)} new")
    for line in format_matches(additions):
        print(line)

    if not additions:
        return 0

    if args.dry_run:
        persist_matches(args.infile, additions, dry_run=True)
        print(f"Dry run: {len(additions)} domain(s) not written to {args.infile}")
    elif args.add_matches or (
            args.prompt_add_matches and confirm(f"Add {len(additions)} domain(s) to {args.infile}? [y/N] ")):
        try:
            written = persist_matches(args.infile, additions)
        except (SeedFileError, OSError) as e:
            LOG.error("Could not update %s: %s", args.infile, e)
            return 1
        print(f"Added {len(written)} domain(s) to {args.infile}")
    else:
        print("Use --add-matches to append them to the seed file.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
