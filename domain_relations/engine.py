# -*- coding: utf-8 -*-
"""
Discovery orchestration.

Round 1 runs the per-domain pipeline over the seeds (sequentially or one
worker process per seed). The frontier is then selected from the round-1
rows and round 2 runs the same pipeline over it, always sequentially.
There is no round 3.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Set

from .classify import classify, redirect_host
from .fingerprint import FingerprintService, dns_overlap
from .hosts import canonical
from .models import DiscoveryResult, VariantResult
from .probe import DEFAULT_TIMEOUT, probe_variant
from .variants import variants

LOG = logging.getLogger("related_domains.engine")


@dataclass(frozen=True)
class ProgressEvent:
    round_no: int
    index: int
    total: int
    domain: str


ProgressCallback = Callable[[ProgressEvent], None]


def analyze_domain(base: str, fingerprints: FingerprintService, prober,
                   timeout: float = DEFAULT_TIMEOUT) -> List[VariantResult]:
    """Fingerprint, probe and classify every TLD variant of one base domain."""
    base = canonical(base)
    base_fp = fingerprints.fingerprint(base)
    rows: List[VariantResult] = []
    for variant in variants(base):
        fp = fingerprints.fingerprint(variant)
        hop = probe_variant(prober, variant, timeout)
        same = dns_overlap(base_fp, fp)
        rows.append(VariantResult(
            base_domain=base,
            variant=variant,
            redirect_target=hop.location,
            http_status=hop.status,
            fingerprint=fp,
            dns_match=same,
            match_type=classify(base, hop.location, same),
        ))
    return rows


def select_frontier(rows: Iterable[VariantResult], tested: Iterable[str]) -> List[str]:
    """
    Round-2 candidates, in discovery order:
      (a) where a base's own row (variant == base) is related, its redirect target;
      (b) every variant classified RedirectBack or SameDNS.
    Anything already tested is dropped.
    """
    seen: Set[str] = {canonical(d) for d in tested}
    out: List[str] = []

    def push(host: Optional[str]):
        if host and host not in seen:
            seen.add(host)
            out.append(host)

    for row in rows:
        if row.is_self_variant and row.match_type.related:
            push(redirect_host(row.redirect_target))
        if row.match_type.related:
            push(canonical(row.variant))
    return out


class Discovery:
    def __init__(self, fingerprints: FingerprintService, prober,
                 timeout: float = DEFAULT_TIMEOUT,
                 progress: Optional[ProgressCallback] = None,
                 parallel_runner: Optional[Callable[..., List[VariantResult]]] = None):
        self.fingerprints = fingerprints
        self.prober = prober
        self.timeout = timeout
        self.progress = progress
        self.parallel_runner = parallel_runner

    def _emit(self, round_no: int, index: int, total: int, domain: str):
        LOG.info("[round %d] %d/%d %s", round_no, index, total, domain)
        if self.progress:
            self.progress(ProgressEvent(round_no, index, total, domain))

    def run_round(self, domains: Sequence[str], round_no: int) -> List[VariantResult]:
        rows: List[VariantResult] = []
        total = len(domains)
        for i, domain in enumerate(domains, 1):
            self._emit(round_no, i, total, domain)
            try:
                rows.extend(analyze_domain(domain, self.fingerprints, self.prober, self.timeout))
            except Exception as e:
                LOG.warning("Skipping %s: %s", domain, e)
        return rows

    def run_parallel_round(self, domains: Sequence[str]) -> List[VariantResult]:
        runner = self.parallel_runner
        if runner is None:
            from .workers import run_parallel
            runner = run_parallel

        def on_done(index: int, total: int, domain: str):
            self._emit(1, index, total, domain)

        return runner(domains, timeout=self.timeout, progress=on_done)

    def discover(self, seeds: Sequence[str], parallel: bool = False) -> DiscoveryResult:
        seed_list: List[str] = []
        for s in seeds:
            c = canonical(s)
            if c and c not in seed_list:
                seed_list.append(c)

        result = DiscoveryResult(seeds=seed_list)
        LOG.info("Round 1: %d seed domain(s)%s", len(seed_list), " (parallel)" if parallel else "")
        if parallel:
            result.rows.extend(self.run_parallel_round(seed_list))
        else:
            result.rows.extend(self.run_round(seed_list, 1))
        result.tested.extend(seed_list)

        result.frontier = select_frontier(result.rows, result.tested)
        LOG.info("Round 2: %d discovered domain(s)", len(result.frontier))
        result.rows.extend(self.run_round(result.frontier, 2))
        result.tested.extend(result.frontier)
        return result
