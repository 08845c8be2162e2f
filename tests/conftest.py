"""
Shared fakes for the discovery tests. Nothing here touches the network.
"""

import pytest
import dns.resolver

from domain_relations.fingerprint import DnsCache, FingerprintService
from domain_relations.models import ProbeResult


class FakeRdata:
    def __init__(self, text):
        self.text = text

    def to_text(self):
        return self.text


class FakeResolver:
    """dnspython-shaped resolver backed by a {domain: {rtype: [values]}} table."""

    def __init__(self, zones=None):
        self.zones = zones or {}
        self.calls = []

    def resolve(self, name, rtype):
        self.calls.append((name, rtype))
        records = self.zones.get(name)
        if records is None:
            raise dns.resolver.NXDOMAIN()
        values = records.get(rtype)
        if not values:
            raise dns.resolver.NoAnswer()
        return [FakeRdata(v) for v in values]


class FakeProber:
    """Redirect probe backed by a {url: ProbeResult} table; unknown URLs fail."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def probe(self, url, timeout=None):
        self.calls.append(url)
        return self.responses.get(url, ProbeResult())


SHARED_A = {"A": ["192.0.2.10"], "NS": ["ns1.host.example.", "ns2.host.example."]}


@pytest.fixture
def example_zones():
    """example.se and example.com share hosting; example.no is someone else."""
    return {
        "example.se": dict(SHARED_A),
        "example.com": dict(SHARED_A),
        "example.no": {"A": ["198.51.100.7"], "NS": ["ns1.other.example."]},
    }


@pytest.fixture
def example_responses():
    return {
        "http://example.com/": ProbeResult(301, "https://example.se/"),
        "http://example.se/": ProbeResult(301, "https://example.se/"),
        "https://example.se/": ProbeResult(200, None),
        "http://example.no/": ProbeResult(200, None),
    }


@pytest.fixture
def resolver(example_zones):
    return FakeResolver(example_zones)


@pytest.fixture
def prober(example_responses):
    return FakeProber(example_responses)


@pytest.fixture
def fingerprints(resolver):
    return FingerprintService(resolver=resolver, cache=DnsCache())


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "domains.txt"
    path.write_text("# customer domains\nexample.se\n\n", encoding="utf-8")
    return path
