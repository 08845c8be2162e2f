# -*- coding: utf-8 -*-
from typing import Optional

from .hosts import canonical, host_of_url
from .models import MatchType


def redirect_host(target: Optional[str]) -> Optional[str]:
    h = host_of_url(target)
    return canonical(h) if h else None


def classify(base_domain: str, redirect_target: Optional[str], dns_match: bool) -> MatchType:
    """
    RedirectBack when the redirect lands exactly on the base host (www-insensitive),
    else SameDNS when the fingerprints overlap, else Unrelated.
    Subdomains of the base do not count as a redirect back.
    """
    target = redirect_host(redirect_target)
    if target and target == canonical(base_domain):
        return MatchType.REDIRECT_BACK
    if dns_match:
        return MatchType.SAME_DNS
    return MatchType.UNRELATED
