# -*- coding: utf-8 -*-
"""Host/URL normalization shared by every stage."""

import re
import unicodedata
from typing import Optional

import httpx
import tldextract

# Offline PSL (no network fetch)
_EXTRACTOR = tldextract.TLDExtract(suffix_list_urls=())


def normalize_host(s: str) -> str:
    s = unicodedata.normalize("NFKC", (s or "").strip().lower().strip("."))
    try:
        return s.encode("idna").decode("ascii")
    except Exception:
        return s


def strip_www(host: str) -> str:
    h = normalize_host(host)
    return h[4:] if h.startswith("www.") else h


def canonical(host: str) -> str:
    """Key used for caching, dedup and equality: lowercase, no trailing dot, no www."""
    return strip_www(host)


def host_of_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        return normalize_host(httpx.URL(url).host or "") or None
    except Exception:
        m = re.search(r"//([^/\s:?#]+)", url)
        return normalize_host(m.group(1)) if m else None


def apex_of(host: str) -> str:
    h = normalize_host(host)
    ext = _EXTRACTOR(h)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    parts = h.split(".")
    return ".".join(parts[-2:]) if len(parts) >= 2 else h
