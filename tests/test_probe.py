"""
Tests for first-hop redirect probing (httpx mock transport, no network).
"""

import httpx

from domain_relations.models import ProbeResult
from domain_relations.probe import RedirectProbe, probe_variant

from conftest import FakeProber


def make_probe(handler):
    return RedirectProbe(timeout=1.0, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestRedirectProbe:

    def test_head_without_following(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(301, headers={"Location": "https://example.se/"})

        with make_probe(handler) as p:
            res = p.probe("http://example.com/")
        assert res == ProbeResult(301, "https://example.se/")
        assert seen == [("HEAD", "http://example.com/")]

    def test_relative_location_is_resolved(self):
        def handler(request):
            return httpx.Response(302, headers={"Location": "/sv/"})

        with make_probe(handler) as p:
            res = p.probe("http://example.com/")
        assert res.location == "http://example.com/sv/"

    def test_plain_response_has_no_location(self):
        with make_probe(lambda request: httpx.Response(200)) as p:
            assert p.probe("https://example.com/") == ProbeResult(200, None)

    def test_transport_error_is_null_pair(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with make_probe(handler) as p:
            assert p.probe("http://example.com/") == ProbeResult(None, None)

    def test_timeout_is_null_pair(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with make_probe(handler) as p:
            assert p.probe("http://example.com/") == ProbeResult()


class TestProbeVariant:

    def test_http_redirect_wins(self):
        prober = FakeProber({
            "http://example.com/": ProbeResult(301, "https://example.se/"),
            "https://example.com/": ProbeResult(200, None),
        })
        assert probe_variant(prober, "example.com") == ProbeResult(301, "https://example.se/")
        assert prober.calls == ["http://example.com/"]

    def test_falls_back_to_https(self):
        prober = FakeProber({
            "http://example.com/": ProbeResult(200, None),
            "https://example.com/": ProbeResult(308, "https://example.se/"),
        })
        assert probe_variant(prober, "example.com").location == "https://example.se/"

    def test_keeps_status_without_redirect(self):
        prober = FakeProber({"http://example.com/": ProbeResult(200, None)})
        assert probe_variant(prober, "example.com") == ProbeResult(200, None)

    def test_no_answer_at_all(self):
        assert probe_variant(FakeProber(), "example.com") == ProbeResult(None, None)
