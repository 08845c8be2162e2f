# -*- coding: utf-8 -*-
from typing import List

from .hosts import strip_www

SUFFIXES = (".se", ".com", ".no", ".fi", ".dk", ".nu")


def stem_of(domain: str) -> str:
    """Everything up to the last dot (example.co.uk -> example.co)."""
    d = strip_www(domain)
    return d.rsplit(".", 1)[0] if "." in d else d


def variants(base_domain: str) -> List[str]:
    # The base itself is kept when it already uses one of SUFFIXES
    stem = stem_of(base_domain)
    return [f"{stem}{sfx}" for sfx in SUFFIXES]
