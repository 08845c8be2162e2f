# -*- coding: utf-8 -*-
"""
Process-per-domain round 1.

Each seed gets its own `python -m domain_relations --worker-domain ...`
process, which runs one pipeline with a private DNS cache and writes its rows
as a JSON array to a temp file. The parent waits for every worker, merges the
files in whatever order they come back and removes them.
"""

import json
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from typing import Callable, List, Optional, Sequence

from .engine import analyze_domain
from .fingerprint import DnsCache, FingerprintService
from .models import VariantResult
from .probe import DEFAULT_TIMEOUT, RedirectProbe

LOG = logging.getLogger("related_domains.workers")

WORKER_CMD = [sys.executable, "-m", "domain_relations"]


class WorkerOutputError(Exception):
    pass


def write_rows_json(path: str, rows: Sequence[VariantResult]) -> None:
    tmp = path + ".part"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in rows], f)
    os.replace(tmp, path)


def read_rows_json(path: str) -> List[VariantResult]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise WorkerOutputError(f"{path}: {e}") from e
    if not isinstance(data, list):
        raise WorkerOutputError(f"{path}: expected a JSON array")
    try:
        return [VariantResult.from_dict(d) for d in data]
    except (KeyError, TypeError, ValueError) as e:
        raise WorkerOutputError(f"{path}: bad row ({e})") from e


def run_worker(domain: str, output_path: str, timeout: float = DEFAULT_TIMEOUT,
               insecure: bool = False, resolver=None, prober=None) -> int:
    """Worker mode: one pipeline, rows to output_path. 0 even when nothing matched."""
    fingerprints = FingerprintService(resolver=resolver, cache=DnsCache())
    if prober is not None:
        rows = analyze_domain(domain, fingerprints, prober, timeout)
    else:
        with RedirectProbe(timeout=timeout, verify=not insecure) as p:
            rows = analyze_domain(domain, fingerprints, p, timeout)
    write_rows_json(output_path, rows)
    LOG.debug("worker %s: %d row(s) -> %s", domain, len(rows), output_path)
    return 0


def spawn_worker(domain: str, output_path: str, timeout: float, insecure: bool = False,
                 debug: bool = False):
    cmd = WORKER_CMD + [
        "--worker-domain", domain,
        "--worker-output", output_path,
        "--timeout-seconds", str(timeout),
    ]
    if insecure:
        cmd.append("--insecure")
    if debug:
        cmd.append("--debug")
    return subprocess.Popen(cmd, stdout=subprocess.DEVNULL)


def run_parallel(domains: Sequence[str], timeout: float = DEFAULT_TIMEOUT,
                 insecure: bool = False, debug: bool = False,
                 progress: Optional[Callable[[int, int, str], None]] = None,
                 spawn: Callable = spawn_worker) -> List[VariantResult]:
    workdir = tempfile.mkdtemp(prefix="related_domains_")
    rows: List[VariantResult] = []
    try:
        jobs = []
        for i, domain in enumerate(domains):
            out = os.path.join(workdir, f"worker_{i}.json")
            try:
                jobs.append((domain, out, spawn(domain, out, timeout, insecure, debug)))
            except OSError as e:
                LOG.warning("Could not start worker for %s: %s", domain, e)
        LOG.info("Started %d worker(s)", len(jobs))

        total = len(jobs)
        for i, (domain, out, proc) in enumerate(jobs, 1):
            rc = proc.wait()
            if progress:
                progress(i, total, domain)
            if rc != 0:
                LOG.warning("Worker for %s exited with %s; skipping", domain, rc)
                continue
            try:
                rows.extend(read_rows_json(out))
            except WorkerOutputError as e:
                LOG.warning("Worker for %s produced no usable output (%s); skipping", domain, e)
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
    return rows
