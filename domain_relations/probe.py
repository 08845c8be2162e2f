# -*- coding: utf-8 -*-
"""
First-hop redirect probing.

A HEAD request with redirects disabled exposes the first Location header.
Transport errors are not failures here: they read as "no redirect".
"""

import logging
from typing import Optional

import httpx

from . import VERSION
from .models import ProbeResult

LOG = logging.getLogger("related_domains.http")

DEFAULT_TIMEOUT = 5.0
SCHEMES = ("http://", "https://")
USER_AGENT = f"related-domains/{VERSION.lstrip('v')}"


class RedirectProbe:
    def __init__(self, timeout: float = DEFAULT_TIMEOUT, verify: bool = True,
                 client: Optional[httpx.Client] = None):
        self.timeout = timeout
        self._own_client = client is None
        self.client = client or httpx.Client(
            timeout=timeout,
            verify=verify,
            follow_redirects=False,
            headers={"User-Agent": USER_AGENT},
        )

    def probe(self, url: str, timeout: Optional[float] = None) -> ProbeResult:
        try:
            r = self.client.head(url, follow_redirects=False,
                                 timeout=timeout if timeout is not None else self.timeout)
        except Exception as e:
            LOG.debug("HEAD %s -> %s", url, e.__class__.__name__)
            return ProbeResult()
        loc = r.headers.get("location")
        if loc:
            try:
                loc = str(httpx.URL(url).join(loc))
            except Exception:
                pass
        LOG.debug("HEAD %s -> %s %s", url, r.status_code, loc or "")
        return ProbeResult(status=r.status_code, location=loc or None)

    def close(self):
        if self._own_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def probe_variant(prober, host: str, timeout: float = DEFAULT_TIMEOUT) -> ProbeResult:
    """http:// first, then https://; the first response carrying a Location wins."""
    status = None
    for scheme in SCHEMES:
        res = prober.probe(f"{scheme}{host}/", timeout)
        if res.location:
            return res
        if res.status is not None:
            status = res.status
    return ProbeResult(status=status, location=None)
