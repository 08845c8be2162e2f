# -*- coding: utf-8 -*-
"""Result types passed between the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class MatchType(str, Enum):
    # Priority order: first applicable wins
    REDIRECT_BACK = "RedirectBack"
    SAME_DNS = "SameDNS"
    UNRELATED = "Unrelated"

    @property
    def related(self) -> bool:
        return self is not MatchType.UNRELATED


class MatchReason(str, Enum):
    ORIGINAL_DOMAIN = "Original domain"
    DISCOVERED_REDIRECT = "Discovered redirect"
    DNS_MATCH = "DNS match"
    REDIRECT_BACK = "RedirectBack"
    VARIANT_MATCH = "Variant match"


@dataclass(frozen=True)
class DomainFingerprint:
    domain: str
    a: Tuple[str, ...] = ()
    aaaa: Tuple[str, ...] = ()
    cname: Tuple[str, ...] = ()
    ns: Tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return not (self.a or self.aaaa or self.cname or self.ns)


@dataclass(frozen=True)
class ProbeResult:
    status: Optional[int] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class VariantResult:
    base_domain: str
    variant: str
    redirect_target: Optional[str]
    http_status: Optional[int]
    fingerprint: DomainFingerprint
    dns_match: bool
    match_type: MatchType

    @property
    def is_self_variant(self) -> bool:
        """True for the row where the variant is the base domain itself."""
        return self.variant == self.base_domain

    def to_dict(self) -> Dict[str, Any]:
        """Flat row, same keys as the CSV export (DNS values stay lists)."""
        fp = self.fingerprint
        return {
            "BaseDomain": self.base_domain,
            "Variant": self.variant,
            "RedirectTarget": self.redirect_target,
            "HttpStatus": self.http_status,
            "DNS_A": list(fp.a),
            "DNS_AAAA": list(fp.aaaa),
            "DNS_CNAME": list(fp.cname),
            "DNS_NS": list(fp.ns),
            "DNSMatch": self.dns_match,
            "MatchType": self.match_type.value,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VariantResult":
        status = d.get("HttpStatus")
        fp = DomainFingerprint(
            domain=d["Variant"],
            a=tuple(d.get("DNS_A") or ()),
            aaaa=tuple(d.get("DNS_AAAA") or ()),
            cname=tuple(d.get("DNS_CNAME") or ()),
            ns=tuple(d.get("DNS_NS") or ()),
        )
        return cls(
            base_domain=d["BaseDomain"],
            variant=d["Variant"],
            redirect_target=d.get("RedirectTarget") or None,
            http_status=int(status) if status is not None else None,
            fingerprint=fp,
            dns_match=bool(d.get("DNSMatch")),
            match_type=MatchType(d["MatchType"]),
        )


@dataclass(frozen=True)
class MatchRecord:
    domain: str
    reason: MatchReason
    source_domain: str


@dataclass
class DiscoveryResult:
    seeds: List[str]
    rows: List[VariantResult] = field(default_factory=list)
    frontier: List[str] = field(default_factory=list)
    tested: List[str] = field(default_factory=list)
