"""
Tests for the link resolver
===========================

The requests session is replaced by a routed MagicMock so every strategy of the
HEAD -> GET -> DOI chain can be driven deterministically.
"""

import pytest
import requests

from debatecards.core.exceptions.exceptions import InvalidInputError
from debatecards.services.link_resolver_service import LinkResolverService
from debatecards.services.status_policy import AcceptableStatusPolicy


def resolver_for(session, **kwargs) -> LinkResolverService:
    return LinkResolverService(session_factory=lambda: session, **kwargs)


def called(session):
    return [(c.kwargs["method"], c.kwargs["url"]) for c in session.request.call_args_list]


# =============================================================================
# Input validation
# =============================================================================

class TestInvalidInput:

    @pytest.mark.parametrize("url", ["not-a-url", "ftp://example.com/file", "mailto:a@b.com", "//example.com", "https://"])
    def test_rejects_non_http_urls(self, make_session, url):
        """Anything that is not an absolute http(s) URL is InvalidInput"""
        session = make_session({})
        with pytest.raises(InvalidInputError) as exc:
            resolver_for(session).resolve(url)
        assert exc.value.message == "URL must be http(s)"
        session.request.assert_not_called()

    def test_rejects_empty_string(self, make_session):
        session = make_session({})
        with pytest.raises(InvalidInputError) as exc:
            resolver_for(session).resolve("")
        assert exc.value.message == "Invalid url"


# =============================================================================
# Strategy chain
# =============================================================================

class TestStrategyChain:

    def test_head_success_short_circuits(self, make_session):
        """A 200 on HEAD returns immediately with the post-redirect URL"""
        session = make_session({("HEAD", "https://example.com"): (200, "https://example.com/")})

        result = resolver_for(session).resolve("https://example.com")

        assert result.to_payload() == {"ok": True, "status": 200, "finalUrl": "https://example.com/"}
        assert called(session) == [("HEAD", "https://example.com")]

    def test_head_follows_redirects_and_reports_final_url(self, make_session):
        """Redirects are followed hop by hop and the last URL is reported"""
        session = make_session({
            ("HEAD", "http://short.ly/x"): (301, None, {"Location": "https://publisher.org/article/42"}),
            ("HEAD", "https://publisher.org/article/42"): (302, None, {"Location": "/article/42/v2"}),
            ("HEAD", "https://publisher.org/article/42/v2"): (200, None),
        })

        result = resolver_for(session).resolve("http://short.ly/x")

        assert result.ok is True
        assert result.status == 200
        assert result.final_url == "https://publisher.org/article/42/v2"
        assert called(session) == [
            ("HEAD", "http://short.ly/x"),
            ("HEAD", "https://publisher.org/article/42"),
            ("HEAD", "https://publisher.org/article/42/v2"),
        ]
        assert all(c.kwargs["allow_redirects"] is False for c in session.request.call_args_list)

    def test_redirect_loop_ends_the_attempt(self, make_session):
        session = make_session({
            ("HEAD", "https://loop.example.com/a"): (302, None, {"Location": "https://loop.example.com/b"}),
            ("HEAD", "https://loop.example.com/b"): (302, None, {"Location": "https://loop.example.com/a"}),
            ("GET", "https://loop.example.com/a"): (200, None),
        })

        result = resolver_for(session).resolve("https://loop.example.com/a")

        assert result.ok is True
        assert called(session)[-1] == ("GET", "https://loop.example.com/a")

    def test_get_fallback_when_head_rejected(self, make_session):
        """HEAD 404 falls through to GET"""
        session = make_session({
            ("HEAD", "https://news.example.org/story"): (404, None),
            ("GET", "https://news.example.org/story"): (200, None),
        })

        result = resolver_for(session).resolve("https://news.example.org/story")

        assert result.ok is True
        assert result.status == 200
        assert called(session) == [("HEAD", "https://news.example.org/story"), ("GET", "https://news.example.org/story")]

    def test_get_is_streamed(self, make_session):
        session = make_session({("GET", "https://example.com/a"): (200, None)})

        resolver_for(session).resolve("https://example.com/a")

        get_call = session.request.call_args_list[1]
        assert get_call.kwargs["stream"] is True

    def test_network_error_on_head_falls_through(self, make_session):
        session = make_session({
            ("HEAD", "https://example.com/a"): requests.ConnectionError("reset by peer"),
            ("GET", "https://example.com/a"): (200, None),
        })

        result = resolver_for(session).resolve("https://example.com/a")

        assert result.ok is True

    def test_both_404_without_doi_is_not_ok(self, make_session):
        session = make_session({}, default=(404, None))

        result = resolver_for(session).resolve("https://example.com/missing")

        assert result.ok is False
        assert result.status == 404
        assert result.final_url is None
        assert len(called(session)) == 2

    def test_all_network_failures_report_error(self, make_session):
        session = make_session({}, default=requests.ConnectionError("Name or service not known"))

        result = resolver_for(session).resolve("https://nope.invalid/x")

        payload = result.to_payload()
        assert payload["ok"] is False
        assert "Name or service not known" in payload["error"]
        assert "finalUrl" not in payload

    def test_session_closed_after_resolution(self, make_session):
        session = make_session({("HEAD", "https://example.com"): (200, None)})
        resolver_for(session).resolve("https://example.com")
        session.close.assert_called_once()


# =============================================================================
# DOI fallback
# =============================================================================

class TestDoiFallback:

    def test_doi_resolves_when_original_is_dead(self, make_session):
        """A dead publisher link with an embedded DOI resolves through doi.org"""
        session = make_session({
            ("HEAD", "https://doi.org/10.1037/abn0000123"): (200, "https://psycnet.apa.org/record/2016-1"),
        }, default=(404, None))

        result = resolver_for(session).resolve("https://journals.example.com/abs/10.1037/abn0000123")

        assert result.ok is True
        assert result.status == 200
        # the canonical DOI form wins over the redirect target
        assert result.final_url == "https://doi.org/10.1037/abn0000123"
        assert called(session) == [
            ("HEAD", "https://journals.example.com/abs/10.1037/abn0000123"),
            ("GET", "https://journals.example.com/abs/10.1037/abn0000123"),
            ("HEAD", "https://doi.org/10.1037/abn0000123"),
        ]

    def test_doi_get_used_when_doi_head_fails(self, make_session):
        session = make_session({
            ("HEAD", "https://doi.org/10.1000/xyz.123"): requests.ReadTimeout("timed out"),
            ("GET", "https://doi.org/10.1000/xyz.123"): (302, "https://publisher.org/landing"),
        }, default=(404, None))

        result = resolver_for(session).resolve("https://example.com/pdf/10.1000/xyz.123")

        assert result.ok is True
        assert result.status == 302
        assert result.final_url == "https://doi.org/10.1000/xyz.123"

    def test_failed_doi_keeps_original_status(self, make_session):
        """A failing DOI never fabricates a final URL"""
        session = make_session({}, default=(404, None))

        result = resolver_for(session).resolve("https://example.com/abs/10.1037/abn0000123")

        assert result.ok is False
        assert result.final_url is None
        assert len(called(session)) == 4

    def test_doi_link_is_not_probed_twice(self, make_session):
        session = make_session({}, default=(404, None))

        resolver_for(session).resolve("https://doi.org/10.1037/abn0000123")

        assert len(called(session)) == 2

    def test_custom_doi_resolver_base(self, make_session):
        session = make_session({("HEAD", "https://dx.doi.org/10.1037/abn0000123"): (200, None)}, default=(404, None))

        result = resolver_for(session, doi_base="https://dx.doi.org/").resolve("https://example.com/10.1037/abn0000123")

        assert result.final_url == "https://dx.doi.org/10.1037/abn0000123"


# =============================================================================
# Status policy and timeouts
# =============================================================================

class TestStatusPolicy:

    @pytest.mark.parametrize("status", [200, 204, 301, 304, 401, 403, 405])
    def test_acceptable_statuses(self, status):
        assert AcceptableStatusPolicy().is_acceptable(status) is True

    @pytest.mark.parametrize("status", [None, 100, 400, 404, 410, 429, 500, 503])
    def test_unacceptable_statuses(self, status):
        assert AcceptableStatusPolicy().is_acceptable(status) is False

    def test_policy_is_configurable(self):
        policy = AcceptableStatusPolicy(extra_statuses=[429])
        assert policy.is_acceptable(429) is True
        assert policy.is_acceptable(403) is False

    def test_blocked_head_counts_as_reachable(self, make_session):
        """403 on HEAD means the server exists but blocks the request"""
        session = make_session({("HEAD", "https://paywalled.example.com/a"): (403, None)})

        result = resolver_for(session).resolve("https://paywalled.example.com/a")

        assert result.ok is True
        assert result.status == 403

    def test_strict_policy_rejects_blocked(self, make_session):
        session = make_session({}, default=(403, None))

        result = resolver_for(session, status_policy=AcceptableStatusPolicy(extra_statuses=[])).resolve("https://example.com/a")

        assert result.ok is False
        assert result.status == 403


class TestTimeouts:

    def test_every_attempt_is_time_bounded(self, make_session):
        """Each request gets at most the attempt's remaining budget"""
        session = make_session({}, default=(404, None))

        resolver_for(session, timeout=2.5).resolve("https://example.com/10.1037/abn0000123")

        budgets = [c.kwargs["timeout"] for c in session.request.call_args_list]
        assert len(budgets) == 4
        assert all(0 < b <= 2.5 for b in budgets)

    def test_each_attempt_closes_its_session(self, make_session):
        session = make_session({}, default=(404, None))

        resolver_for(session).resolve("https://example.com/missing")

        assert session.close.call_count == 2

    def test_timeouts_still_produce_a_result(self, make_session):
        """An attempt that never answers ends only that attempt"""
        session = make_session({}, default=requests.ConnectTimeout("connect timeout=8"))

        result = resolver_for(session).resolve("https://slow.example.com/")

        assert result.ok is False
        assert result.error
        assert len(called(session)) == 2

    def test_default_timeout_is_eight_seconds(self):
        assert LinkResolverService().timeout == 8.0


class TestIdempotence:

    def test_same_result_twice(self, make_session):
        session = make_session({("HEAD", "https://example.com"): (200, "https://example.com/")})
        resolver = resolver_for(session)

        first = resolver.resolve("https://example.com")
        second = resolver.resolve("https://example.com")

        assert (first.ok, first.status) == (second.ok, second.status)
