# -*- coding: utf-8 -*-
import csv
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from .hosts import apex_of
from .models import MatchRecord, VariantResult

CSV_FIELDS = [
    "BaseDomain", "Variant", "RedirectTarget", "HttpStatus",
    "DNS_A", "DNS_AAAA", "DNS_CNAME", "DNS_NS",
    "DNSMatch", "MatchType",
]
# IPv6 values contain ':', so multi-value cells use ';'
CSV_JOIN = ";"


def write_results_csv(path: str, rows: Iterable[VariantResult]) -> int:
    n = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        for r in rows:
            fp = r.fingerprint
            w.writerow({
                "BaseDomain": r.base_domain,
                "Variant": r.variant,
                "RedirectTarget": r.redirect_target or "",
                "HttpStatus": r.http_status if r.http_status is not None else "",
                "DNS_A": CSV_JOIN.join(fp.a),
                "DNS_AAAA": CSV_JOIN.join(fp.aaaa),
                "DNS_CNAME": CSV_JOIN.join(fp.cname),
                "DNS_NS": CSV_JOIN.join(fp.ns),
                "DNSMatch": r.dns_match,
                "MatchType": r.match_type.value,
            })
            n += 1
    return n


def format_matches(records: Sequence[MatchRecord]) -> List[str]:
    """One line per match, grouped by registered domain of the source."""
    groups: Dict[str, List[MatchRecord]] = defaultdict(list)
    for r in records:
        groups[apex_of(r.source_domain)].append(r)
    out: List[str] = []
    for apex in sorted(groups):
        out.append(f"[{apex}]")
        for r in groups[apex]:
            out.append(f"  {r.domain:<40} {r.reason.value} (via {r.source_domain})")
    return out


def explain_lines(base: str, rows: Iterable[VariantResult]) -> List[str]:
    lines = [f"[Explain] base={base}"]
    for r in rows:
        if r.base_domain != base:
            continue
        fp = r.fingerprint
        dns_info = "no DNS" if fp.empty else (
            f"A={len(fp.a)} AAAA={len(fp.aaaa)} CNAME={len(fp.cname)} NS={len(fp.ns)}")
        lines.append(
            f" - {r.variant}: {r.match_type.value}; status={r.http_status}, "
            f"redirect={r.redirect_target or '-'}, dns_match={r.dns_match} ({dns_info})"
        )
    if len(lines) == 1:
        lines.append(" - not probed in this run")
    return lines
