# -*- coding: utf-8 -*-
"""
DNS fingerprinting.

A fingerprint is the A/AAAA/CNAME/NS record set of a domain. Lookups never
raise: a record type that cannot be resolved is simply empty. Results are
memoized in a DnsCache that lives for one run (one process).
"""

import logging
from typing import Dict, Iterable, List, Optional

import dns.exception
import dns.resolver

from .hosts import canonical
from .models import DomainFingerprint

LOG = logging.getLogger("related_domains.dns")

RECORD_TYPES = ("A", "AAAA", "CNAME", "NS")

# One shared nameserver is common noise (registrar/parking defaults)
NS_MIN_OVERLAP = 2
ADDR_MIN_OVERLAP = 1

DNS_TIMEOUT = 2.0
DNS_LIFETIME = 4.0


class DnsCache:
    """Per-run fingerprint memo keyed by canonical domain name."""

    def __init__(self):
        self._items: Dict[str, DomainFingerprint] = {}

    def get(self, domain: str) -> Optional[DomainFingerprint]:
        return self._items.get(canonical(domain))

    def put(self, fp: DomainFingerprint) -> DomainFingerprint:
        # First write wins; cached fingerprints are never replaced
        return self._items.setdefault(canonical(fp.domain), fp)

    def __contains__(self, domain: str) -> bool:
        return canonical(domain) in self._items

    def __len__(self) -> int:
        return len(self._items)


def default_resolver() -> dns.resolver.Resolver:
    r = dns.resolver.Resolver(configure=True)
    r.timeout = DNS_TIMEOUT
    r.lifetime = DNS_LIFETIME
    return r


def _clean(values: Iterable[str]) -> tuple:
    out = {str(v).strip().rstrip(".").lower() for v in values}
    out.discard("")
    return tuple(sorted(out))


class FingerprintService:
    def __init__(self, resolver=None, cache: Optional[DnsCache] = None):
        self.resolver = resolver if resolver is not None else default_resolver()
        self.cache = cache if cache is not None else DnsCache()

    def query(self, name: str, rtype: str) -> List[str]:
        try:
            ans = self.resolver.resolve(name, rtype)
            return [rr.to_text() if hasattr(rr, "to_text") else str(rr) for rr in ans]
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.NoNameservers) as e:
            LOG.debug("%s %s -> %s", rtype, name, e.__class__.__name__)
        except dns.exception.Timeout:
            LOG.debug("%s %s -> timeout", rtype, name)
        except Exception as e:
            LOG.debug("%s %s -> %s", rtype, name, e)
        return []

    def fingerprint(self, domain: str) -> DomainFingerprint:
        name = canonical(domain)
        cached = self.cache.get(name)
        if cached is not None:
            return cached
        records = {rtype: _clean(self.query(name, rtype)) for rtype in RECORD_TYPES}
        fp = DomainFingerprint(
            domain=name,
            a=records["A"],
            aaaa=records["AAAA"],
            cname=records["CNAME"],
            ns=records["NS"],
        )
        LOG.debug("fingerprint %s: A=%d AAAA=%d CNAME=%d NS=%d",
                  name, len(fp.a), len(fp.aaaa), len(fp.cname), len(fp.ns))
        return self.cache.put(fp)


def dns_overlap(left: DomainFingerprint, right: DomainFingerprint) -> bool:
    """Same hosting: one shared A/AAAA/CNAME value, or at least two shared NS."""
    for mine, theirs in ((left.a, right.a), (left.aaaa, right.aaaa), (left.cname, right.cname)):
        if len(set(mine) & set(theirs)) >= ADDR_MIN_OVERLAP:
            return True
    return len(set(left.ns) & set(right.ns)) >= NS_MIN_OVERLAP
