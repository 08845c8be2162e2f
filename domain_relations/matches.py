# -*- coding: utf-8 -*-
"""
Match aggregation and seed-file persistence.

Candidates come from related variants and from justified redirect targets.
Each candidate carries the reason it qualified. Anything already in the seed
file, commented out or not, is never added again; new entries are appended
under one timestamped header and existing lines are left untouched.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .classify import redirect_host
from .hosts import canonical
from .models import MatchReason, MatchRecord, MatchType, VariantResult

LOG = logging.getLogger("related_domains.matches")

HEADER_FMT = "# Added by related-domains {ts}"


class SeedFileError(Exception):
    """The seed file is missing or unreadable."""


# ---------- seed file ----------

def _read_lines(path: str) -> List[str]:
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise SeedFileError(f"Cannot read seed file {path}: {e}") from e


def _first_token(line: str) -> str:
    parts = line.split()
    return parts[0] if parts else ""


def read_seed_file(path: str) -> List[str]:
    seeds: List[str] = []
    for line in _read_lines(path):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        d = canonical(_first_token(line))
        if d and d not in seeds:
            seeds.append(d)
    return seeds


def known_domains(path: str) -> Set[str]:
    """
    First token of every line, commented lines included. Not filtered on
    shape: whatever host the aggregator can produce must also be matchable here.
    """
    known: Set[str] = set()
    for line in _read_lines(path):
        d = canonical(_first_token(line.strip().lstrip("#")))
        if d:
            known.add(d)
    return known


# ---------- aggregation ----------

def collect_matches(rows: Iterable[VariantResult], seeds: Iterable[str],
                    frontier: Iterable[str] = ()) -> List[MatchRecord]:
    """
    Pass 1: variants classified RedirectBack/SameDNS. A seed's variants are a
    plain "Variant match"; variants of discovered bases carry their evidence.
    Pass 2: redirect targets, when the base is a seed and the row is related,
    or the base is a discovered domain and there is DNS or RedirectBack evidence.
    Self-redirects never qualify, a base is never its own discovery, and the
    first reason recorded for a domain wins.
    """
    rows = list(rows)
    seed_set = {canonical(s) for s in seeds}
    frontier_set = {canonical(f) for f in frontier}
    found: Dict[str, MatchRecord] = {}

    def add(host: Optional[str], reason: MatchReason, source: str):
        if not host or host in seed_set or host in found:
            return
        found[host] = MatchRecord(domain=host, reason=reason, source_domain=source)

    for row in rows:
        if not row.match_type.related or row.is_self_variant:
            continue
        variant = canonical(row.variant)
        if redirect_host(row.redirect_target) == variant:
            LOG.debug("Ignoring self-redirecting variant %s", variant)
            continue
        if row.base_domain in seed_set:
            reason = MatchReason.VARIANT_MATCH
        elif row.match_type is MatchType.REDIRECT_BACK:
            reason = MatchReason.REDIRECT_BACK
        else:
            reason = MatchReason.DNS_MATCH
        add(variant, reason, row.base_domain)

    for row in rows:
        target = redirect_host(row.redirect_target)
        if not target or target in (canonical(row.variant), row.base_domain):
            continue
        if row.base_domain in seed_set and row.match_type.related:
            add(target, MatchReason.ORIGINAL_DOMAIN, row.base_domain)
        elif row.base_domain in frontier_set and (
                row.dns_match or row.match_type is MatchType.REDIRECT_BACK):
            add(target, MatchReason.DISCOVERED_REDIRECT, row.base_domain)

    return list(found.values())


def new_matches(records: Sequence[MatchRecord], seed_path: str) -> List[MatchRecord]:
    known = known_domains(seed_path)
    out: List[MatchRecord] = []
    for r in records:
        d = canonical(r.domain)
        if d and d not in known:
            known.add(d)
            out.append(r)
    return out


# ---------- persistence ----------

def append_matches(seed_path: str, records: Sequence[MatchRecord],
                   now: Optional[datetime] = None) -> int:
    """Append records under one header. Returns the number of lines added."""
    if not records:
        return 0
    ts = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    try:
        with open(seed_path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise SeedFileError(f"Cannot read seed file {seed_path}: {e}") from e

    lines = [HEADER_FMT.format(ts=ts)] + [canonical(r.domain) for r in records]
    chunk = "\n".join(lines) + "\n"
    if data and not data.endswith(b"\n"):
        chunk = "\n" + chunk
    with open(seed_path, "a", encoding="utf-8", newline="") as f:
        f.write(chunk)
    LOG.info("Appended %d domain(s) to %s", len(records), seed_path)
    return len(records)


def persist_matches(seed_path: str, records: Sequence[MatchRecord],
                    dry_run: bool = False, now: Optional[datetime] = None) -> List[MatchRecord]:
    """New records for seed_path; written unless dry_run. Same list either way."""
    additions = new_matches(records, seed_path)
    if dry_run:
        LOG.info("Dry run: %d domain(s) would be added to %s", len(additions), seed_path)
    else:
        append_matches(seed_path, additions, now=now)
    return additions
